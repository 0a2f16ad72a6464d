# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core enums and base contracts
# PURPOSE: Define flat record kinds and shared identity contracts
# CREATED: 18 OCT 2026
# EXPORTS: RecordKind, TemplateData, ConfigData
# DEPENDENCIES: enum, pydantic
# ============================================================================
"""
Base contracts for the SLD store.

These define the minimal identity fields that cross boundaries:
- SQL (PostgreSQL)
- HTTP (FastAPI request/response bodies)
- Python (ingestion pipeline)

Boundary-specific models inherit from these contracts.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# ============================================================================
# RECORD KINDS
# ============================================================================

class RecordKind(str, Enum):
    """
    Kind tag in column 0 of a flat template record.

    Dependency order:
        FEATURE_TYPE -> RULE -> FIELD
    A RULE belongs to the most recent FEATURE_TYPE, a FIELD to the most
    recent RULE.
    """
    FEATURE_TYPE = "FeatureType"
    RULE = "Rule"
    FIELD = "Field"

    @classmethod
    def from_tag(cls, tag: str) -> Optional["RecordKind"]:
        """Look up a kind by its tag, None for unknown tags."""
        for kind in cls:
            if kind.value == tag:
                return kind
        return None


# ============================================================================
# BASE DATA CONTRACTS
# ============================================================================

class TemplateData(BaseModel):
    """
    Essential template identity.
    """
    name: str = Field(..., max_length=255, description="Display name of the template")

    model_config = {"frozen": False}


class ConfigData(BaseModel):
    """
    Essential config identity - a user's instantiation of a template.
    """
    template_id: int = Field(..., description="Template this config was derived from")
    uuid: Optional[str] = Field(default=None, max_length=64, description="Ownership token")

    model_config = {"frozen": False}
