# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the SLD store.
"""

from core.config.defaults import (
    DatabaseDefaults,
    IngestDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "DatabaseDefaults",
    "IngestDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
