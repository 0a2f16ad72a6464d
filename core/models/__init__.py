# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# CREATED: 18 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

All Pydantic models for the SLD store.
Models define SQL metadata via __sql_* ClassVar attributes for DDL generation.

Single Source of Truth Pattern:
    - Pydantic models define structure
    - PydanticToSQL reads __sql_* metadata
    - PostgreSQL schema generated from models
"""

from core.models.template import SldTemplate, FeatureType, Rule
from core.models.param import ParamType, Param
from core.models.config import SldConfig, ConfigValue
from core.models.records import (
    FlatRecord,
    FeatureTypeRecord,
    RuleRecord,
    FieldRecord,
    parse_flat_line,
    parse_flat_records,
)

__all__ = [
    # Template hierarchy
    "SldTemplate",
    "FeatureType",
    "Rule",
    # Parameters
    "ParamType",
    "Param",
    # Configs
    "SldConfig",
    "ConfigValue",
    # Flat records
    "FlatRecord",
    "FeatureTypeRecord",
    "RuleRecord",
    "FieldRecord",
    "parse_flat_line",
    "parse_flat_records",
]
