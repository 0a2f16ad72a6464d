# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export core contracts, errors, models, and schema utilities
# CREATED: 18 OCT 2026
# ============================================================================

from core.contracts import RecordKind
from core.errors import (
    RepositoryError,
    DatabaseConnectionError,
    StatementError,
    NotFoundError,
    ClosedError,
    IngestError,
    OrphanRuleError,
    OrphanFieldError,
    MalformedLineError,
    ReplaceError,
    DuplicateParamError,
)
from core.models import (
    SldTemplate,
    FeatureType,
    Rule,
    ParamType,
    Param,
    SldConfig,
    ConfigValue,
    FlatRecord,
)
from core.schema import PydanticToSQL

__all__ = [
    # Enums
    "RecordKind",
    # Errors
    "RepositoryError",
    "DatabaseConnectionError",
    "StatementError",
    "NotFoundError",
    "ClosedError",
    "IngestError",
    "OrphanRuleError",
    "OrphanFieldError",
    "MalformedLineError",
    "ReplaceError",
    "DuplicateParamError",
    # Models
    "SldTemplate",
    "FeatureType",
    "Rule",
    "ParamType",
    "Param",
    "SldConfig",
    "ConfigValue",
    "FlatRecord",
    # Schema
    "PydanticToSQL",
]
