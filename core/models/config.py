# ============================================================================
# CONFIG MODELS
# ============================================================================
# STATUS: Domain model - User instantiations of templates
# PURPOSE: sld_config rows and their sld_value sets
# CREATED: 18 OCT 2026
# EXPORTS: SldConfig, ConfigValue
# DEPENDENCIES: pydantic
# ============================================================================
"""
Config Models

A config is one user's instantiation of a template. Config rows are created
by the API layer; this package only replaces their value sets.

The ConfigValue rows of a config are its complete, exclusive set of
customized values: at most one row per (config_id, param_id).
"""

from datetime import datetime, timezone
from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field

from core.contracts import ConfigData


class SldConfig(ConfigData):
    """
    Named, user-owned instantiation of a template.

    Maps to: sld_config
    """

    __sql_table__: ClassVar[str] = "sld_config"
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
        "template_id": "sld_template(id)",
    }
    __sql_indexes__: ClassVar[List] = [
        ("idx_sld_config_template", ["template_id"]),
        ("idx_sld_config_uuid", ["uuid"]),
    ]

    id: Optional[int] = None
    name: str = Field(..., max_length=255)
    output_path: Optional[str] = Field(default=None, max_length=500)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ConfigValue(BaseModel):
    """
    One customized parameter value of a config.

    Maps to: sld_value
    """

    __sql_table__: ClassVar[str] = "sld_value"
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
        "config_id": "sld_config(id)",
        "param_id": "sld_param(id)",
    }
    __sql_indexes__: ClassVar[List] = []
    # At most one value per param in a config; also serves lookups by config_id
    __sql_unique_indexes__: ClassVar[List] = [
        ("idx_unique_sld_value_config_param", ["config_id", "param_id"]),
    ]

    id: Optional[int] = None
    config_id: int
    param_id: int
    value: str = ""

    model_config = {"frozen": False}


__all__ = ["SldConfig", "ConfigValue"]
