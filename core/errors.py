# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# STATUS: Foundation - Exceptions raised by the persistence engine
# PURPOSE: One exception type per failure class, with operation context
# CREATED: 18 OCT 2026
# ============================================================================
"""
Error Taxonomy

Every exception raised by the engine derives from RepositoryError and carries
the operation it interrupted. By the time one of these reaches a caller, the
enclosing unit of work has already been rolled back.

    RepositoryError
    ├── DatabaseConnectionError   connect / BEGIN failed
    ├── StatementError            a single statement failed
    ├── NotFoundError             exactly-one query returned nothing
    ├── ClosedError               unit of work used after commit/rollback
    ├── IngestError               flat record stream is structurally invalid
    │   ├── OrphanRuleError
    │   ├── OrphanFieldError
    │   └── MalformedLineError
    └── ReplaceError              config value set is invalid
        └── DuplicateParamError
"""

from typing import Optional


class RepositoryError(Exception):
    """Base exception for repository operations."""

    def __init__(self, message: str, operation: str = None, entity_id: str = None):
        self.operation = operation
        self.entity_id = entity_id
        super().__init__(message)


class DatabaseConnectionError(RepositoryError):
    """Cannot establish a connection or begin a transaction."""


class StatementError(RepositoryError):
    """
    A single statement failed.

    Ingestion failures carry the line number and record kind; config value
    failures carry the param_id.
    """

    def __init__(
        self,
        message: str,
        operation: str = None,
        entity_id: str = None,
        line_number: Optional[int] = None,
        kind: Optional[str] = None,
        param_id: Optional[int] = None,
    ):
        self.line_number = line_number
        self.kind = kind
        self.param_id = param_id
        super().__init__(message, operation=operation, entity_id=entity_id)


class NotFoundError(RepositoryError):
    """A query expected to return exactly one row returned none."""


class ClosedError(RepositoryError):
    """Unit of work used after commit or rollback."""


class IngestError(RepositoryError):
    """Flat record stream violates the dependency ordering contract."""

    def __init__(self, message: str, line_number: Optional[int] = None, kind: Optional[str] = None):
        self.line_number = line_number
        self.kind = kind
        super().__init__(message, operation="ingest_template")


class OrphanRuleError(IngestError):
    """Rule line appeared before any FeatureType line."""


class OrphanFieldError(IngestError):
    """Field line appeared with no current Rule."""


class MalformedLineError(IngestError):
    """Line has an unknown kind tag or unusable columns."""


class ReplaceError(RepositoryError):
    """Config value set cannot be applied."""

    def __init__(self, message: str, config_id: Optional[int] = None, param_id: Optional[int] = None):
        self.config_id = config_id
        self.param_id = param_id
        super().__init__(
            message,
            operation="replace_config_values",
            entity_id=str(config_id) if config_id is not None else None,
        )


class DuplicateParamError(ReplaceError):
    """The same param_id appears more than once in one value set."""


__all__ = [
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
]
