# ============================================================================
# CONFIG VALUE REPLACER
# ============================================================================
# STATUS: Service - Atomic replacement of a config's value set
# PURPOSE: Delete-then-insert the sld_value rows of one config
# CREATED: 18 OCT 2026
# ============================================================================
"""
Config Value Replacer

A config's value rows are always its complete set: the replacer deletes the
old rows and inserts the new ones inside the caller's unit of work. If any
insert fails the unit rolls back and the previous rows are still there.
"""

from typing import Any, Iterable, List, Mapping, Tuple, Union

from core.errors import DuplicateParamError, ReplaceError
from core.logging import get_logger, ComponentType
from repositories import SldRepository

logger = get_logger(__name__, ComponentType.SERVICE)

ValueInput = Union[Mapping[int, Any], Iterable[Any]]


def _coerce_value(value: Any) -> str:
    return "" if value is None else str(value)


def normalize_values(config_id: int, values: ValueInput) -> List[Tuple[int, str]]:
    """
    Turn the accepted value shapes into ordered (param_id, text) pairs.

    Accepts a mapping of param_id to value, pairs, or objects exposing
    param_id and value attributes (ConfigValue, request items).

    Raises:
        DuplicateParamError: A param_id appears twice
        ReplaceError: An entry is not a pair or has no usable param_id
    """
    if isinstance(values, Mapping):
        items = list(values.items())
    else:
        items = []
        for entry in values:
            if hasattr(entry, "param_id"):
                items.append((entry.param_id, getattr(entry, "value", None)))
            else:
                try:
                    param_id, value = entry
                except (TypeError, ValueError):
                    raise ReplaceError(
                        f"Config {config_id}: entry {entry!r} is not a (param_id, value) pair",
                        config_id=config_id,
                    )
                items.append((param_id, value))

    pairs: List[Tuple[int, str]] = []
    seen = set()
    for param_id, value in items:
        try:
            param_id = int(param_id)
        except (TypeError, ValueError):
            raise ReplaceError(
                f"Config {config_id}: param_id {param_id!r} is not an integer",
                config_id=config_id,
            )
        if param_id in seen:
            raise DuplicateParamError(
                f"Config {config_id}: param {param_id} given more than once",
                config_id=config_id,
                param_id=param_id,
            )
        seen.add(param_id)
        pairs.append((param_id, _coerce_value(value)))

    return pairs


class ConfigValueReplacer:
    """Replaces the value set of one config through an open unit of work."""

    def __init__(self, repository: SldRepository):
        self.repository = repository

    async def replace(self, config_id: int, values: ValueInput) -> int:
        """
        Delete all value rows of the config, then insert the new set in order.

        Returns:
            Number of rows inserted

        Raises:
            DuplicateParamError: Before any statement runs
            StatementError: Delete or insert failed (carries param_id)
        """
        pairs = normalize_values(config_id, values)

        removed = await self.repository.delete_config_values(config_id)
        for param_id, value in pairs:
            await self.repository.insert_config_value(config_id, param_id, value)

        logger.info(f"Config {config_id}: replaced {removed} values with {len(pairs)}")
        return len(pairs)


__all__ = ["ConfigValueReplacer", "normalize_values"]
