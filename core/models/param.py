# ============================================================================
# PARAMETER MODELS
# ============================================================================
# STATUS: Domain model - Modifiable parameters and their type catalog
# PURPOSE: sld_param rows and the shared sld_type catalog
# CREATED: 18 OCT 2026
# EXPORTS: ParamType, Param
# DEPENDENCIES: pydantic
# ============================================================================
"""
Parameter Models

A Param is one modifiable value inside a rule. Its position in the template
is the placeholder offset; its kind is a row in the shared ParamType catalog,
keyed by the symbolizer path (e.g. "point-color").

The catalog is append-only and shared by all templates.
"""

from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field


class ParamType(BaseModel):
    """
    Catalog entry for one kind of parameter.

    Maps to: sld_type
    """

    __sql_table__: ClassVar[str] = "sld_type"
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {}
    __sql_indexes__: ClassVar[List] = [
        ("idx_sld_type_symbolizer", ["symbolizer"]),
    ]
    # Only emitted when the upsert race policy is enabled
    __sql_upsert_indexes__: ClassVar[List] = [
        ("idx_unique_sld_type_symbolizer", ["symbolizer"]),
    ]

    id: Optional[int] = None
    name: str = Field(default="", description="Descriptive name, empty on creation")
    symbolizer: str = Field(..., description="Natural key: location of the parameter in the SLD structure")

    model_config = {"frozen": False}


class Param(BaseModel):
    """
    Modifiable parameter inside a rule.

    Maps to: sld_param
    """

    __sql_table__: ClassVar[str] = "sld_param"
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
        "rule_id": "sld_rule(id)",
        "type_id": "sld_type(id)",
    }
    __sql_indexes__: ClassVar[List] = [
        ("idx_sld_param_rule", ["rule_id"]),
        ("idx_sld_param_type", ["type_id"]),
    ]

    id: Optional[int] = None
    rule_id: int
    template_offset: int = Field(..., ge=0, description="Offset into the template's placeholder sequence")
    type_id: int
    default_value: str = ""

    model_config = {"frozen": False}


__all__ = ["ParamType", "Param"]
