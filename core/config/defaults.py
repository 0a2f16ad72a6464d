# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for database access and flat-record ingestion
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides sensible defaults for the SLD store.
These can be overridden via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class DatabaseDefaults:
    """
    Defaults for PostgreSQL access.

    Controls schema placement, pool sizing and the parameter type catalog
    race policy.
    """
    # Schema holding all sld_* tables
    schema: str = "sld"

    # Pool sizing
    pool_min_size: int = 2
    pool_max_size: int = 10

    # Seconds to wait for a connection before giving up
    connect_timeout: float = 30.0

    # Unique symbolizer index + INSERT ... ON CONFLICT in the type resolver
    param_type_upsert: bool = False

    @classmethod
    def from_env(cls) -> "DatabaseDefaults":
        """Create from environment variables."""
        return cls(
            schema=os.getenv("SLD_SCHEMA", "sld"),
            pool_min_size=int(os.getenv("DB_POOL_MIN_SIZE", 2)),
            pool_max_size=int(os.getenv("DB_POOL_MAX_SIZE", 10)),
            connect_timeout=float(os.getenv("DB_CONNECT_TIMEOUT", 30.0)),
            param_type_upsert=_env_flag("SLD_PARAM_TYPE_UPSERT"),
        )


@dataclass(frozen=True)
class IngestDefaults:
    """
    Defaults for the flat record format produced by the SLD parser.

    Columns are tab separated; rule names are semicolon joined.
    """
    field_separator: str = "\t"
    name_separator: str = ";"

    @classmethod
    def from_env(cls) -> "IngestDefaults":
        """Create from environment variables."""
        return cls(
            field_separator=os.getenv("SLD_FIELD_SEPARATOR", "\t"),
            name_separator=os.getenv("SLD_NAME_SEPARATOR", ";"),
        )


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    database: DatabaseDefaults = field(default_factory=DatabaseDefaults)
    ingest: IngestDefaults = field(default_factory=IngestDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            database=DatabaseDefaults.from_env(),
            ingest=IngestDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DatabaseDefaults",
    "IngestDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
