# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Context-aware logging for the SLD store
# PURPOSE: Attach template/config/line ids to every record emitted during a load
# CREATED: 18 OCT 2026
# ============================================================================
"""
Structured Logging

Loggers are plain stdlib loggers wrapped in a ContextLogger. The ids of the
template, config or source line being processed live in a ContextVar, so
concurrent requests on one event loop each see their own context.

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger(__name__, ComponentType.LOADER)

    with log_context(template_id=42, operation="ingest_template"):
        with log_context(line_number=3):
            logger.info("Rule inserted")
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Union


class ComponentType(str, Enum):
    API = "api"
    REPOSITORY = "repository"
    SERVICE = "service"
    LOADER = "loader"
    SCRIPT = "script"


@dataclass(frozen=True)
class LogContext:
    """Ids of the unit of work currently being logged. Unset fields are None."""
    template_id: Optional[int] = None
    config_id: Optional[int] = None
    line_number: Optional[int] = None
    correlation_id: Optional[str] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        result.update(self.extra)
        return result

    def short_ids(self) -> str:
        """'template=12, line=3' style summary for one-line output."""
        labels = (("template", self.template_id), ("config", self.config_id), ("line", self.line_number))
        return ", ".join(f"{label}={value}" for label, value in labels if value is not None)


_current: ContextVar[LogContext] = ContextVar("sld_log_context", default=LogContext())


def get_current_context() -> LogContext:
    return _current.get()


@contextmanager
def log_context(**kwargs) -> Iterator[LogContext]:
    """
    Layer fields over the enclosing context for the duration of the block.

    Fields not given are inherited; ``extra`` dicts are merged.
    """
    parent = _current.get()
    extra = {**parent.extra, **kwargs.pop("extra", {})}
    token = _current.set(replace(parent, extra=extra, **kwargs))
    try:
        yield _current.get()
    finally:
        _current.reset(token)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": _utc_now().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = get_current_context().to_dict()
        if context:
            payload["context"] = context

        data = getattr(record, "data", None)
        if data:
            payload["data"] = data

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload["source"] = f"{record.filename}:{record.lineno}"
        return json.dumps(payload, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line output for local runs and scripts."""

    def format(self, record: logging.LogRecord) -> str:
        ids = get_current_context().short_ids()
        prefix = f"{_utc_now():%Y-%m-%d %H:%M:%S} {record.levelname:<8} {record.name}"
        if ids:
            prefix += f" [{ids}]"

        line = f"{prefix}: {record.getMessage()}"
        data = getattr(record, "data", None)
        if data:
            line = f"{line} {data}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class ContextLogger(logging.LoggerAdapter):
    """
    Moves keyword ``extra`` into a single ``data`` record attribute.

    Keeps caller fields from colliding with LogRecord attributes such as
    ``name`` or ``message``.
    """

    def process(self, msg, kwargs):
        data = dict(kwargs.pop("extra", None) or {})
        component = self.extra.get("component")
        if component is not None:
            data.setdefault("component", component.value)
        kwargs["extra"] = {"data": data}
        return msg, kwargs


def get_logger(name: str, component: Optional[ComponentType] = None) -> ContextLogger:
    return ContextLogger(logging.getLogger(name), {"component": component})


def configure_logging(level: Union[str, int] = "INFO", json_output: bool = False) -> None:
    """
    Install a single stdout handler on the root logger.

    JSON output is used when ``json_output`` is set or LOG_FORMAT=json.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    use_json = json_output or os.getenv("LOG_FORMAT", "").lower() == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if use_json else HumanFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Mark a committed transaction (template_ingested, config_values_replaced).

    Logged on the "checkpoint" logger unless one is given, with the ids of the
    current context copied into the record data.
    """
    target = logger or logging.getLogger("checkpoint")
    context = get_current_context()

    payload: Dict[str, Any] = {"checkpoint": name}
    if context.template_id is not None:
        payload["template_id"] = context.template_id
    if context.config_id is not None:
        payload["config_id"] = context.config_id
    if data:
        payload.update(data)

    target.info("CHECKPOINT: %s", name, extra={"data": payload})


__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
