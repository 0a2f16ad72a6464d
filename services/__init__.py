# ============================================================================
# SERVICES MODULE
# ============================================================================
# STATUS: Core - Business logic layer
# PURPOSE: Template ingestion, config value replacement and read queries
# CREATED: 18 OCT 2026
# ============================================================================
"""
Services Module

Business logic for the SLD store.
Services compose a unit of work with the repository per operation.

Usage:
    from services import SldService

    service = SldService(pool)
    result = await service.ingest_template(content, "roads", lines)
"""

from .type_catalog import TypeCatalogResolver
from .loader import HierarchicalLoader, LoadResult, ScanState
from .config_values import ConfigValueReplacer, normalize_values
from .sld_service import SldService

__all__ = [
    "TypeCatalogResolver",
    "HierarchicalLoader",
    "LoadResult",
    "ScanState",
    "ConfigValueReplacer",
    "normalize_values",
    "SldService",
]
