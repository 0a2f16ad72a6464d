# ============================================================================
# TEMPLATE HIERARCHY MODELS
# ============================================================================
# STATUS: Domain model - SLD template and its structural rows
# PURPOSE: Template -> FeatureType -> Rule rows created by the loader
# CREATED: 18 OCT 2026
# EXPORTS: SldTemplate, FeatureType, Rule
# DEPENDENCIES: pydantic
# ============================================================================
"""
Template Hierarchy Models

An SLD template is stored once per upload together with the structure the
parser found in it:

    sld_template
      └── sld_featuretype   (FeatureTypeStyle tags)
            └── sld_rule    (Rules inside FeatureTypeStyles)
                  └── sld_param  (see core.models.param)

Rows are created by the hierarchical loader and are not mutated afterwards;
user edits go through configs (core.models.config).
"""

from datetime import datetime, timezone
from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field

from core.contracts import TemplateData


class SldTemplate(TemplateData):
    """
    Uploaded SLD template with modifiable parameters replaced by placeholders.

    Maps to: sld_template
    """

    # SQL DDL METADATA
    __sql_table__: ClassVar[str] = "sld_template"
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {}
    __sql_indexes__: ClassVar[List] = [
        ("idx_sld_template_created", ["created_at"]),
    ]

    id: Optional[int] = Field(default=None, description="Generated identifier")

    # Raw template text; omitted from list queries unless requested
    content: Optional[str] = Field(default=None)

    uuid: Optional[str] = Field(default=None, max_length=64, description="Uploader token")
    sld_filename: Optional[str] = Field(default=None, max_length=255)
    wms_url: Optional[str] = Field(default=None, max_length=500)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class FeatureType(BaseModel):
    """
    FeatureTypeStyle within a template.

    Maps to: sld_featuretype
    """

    __sql_table__: ClassVar[str] = "sld_featuretype"
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
        "template_id": "sld_template(id)",
    }
    __sql_indexes__: ClassVar[List] = [
        ("idx_sld_featuretype_template", ["template_id"]),
    ]

    id: Optional[int] = None
    template_id: int
    name: str = ""
    title: str = ""
    featuretype_name: str = ""

    model_config = {"frozen": False}


class Rule(BaseModel):
    """
    Rule inside a FeatureTypeStyle.

    Maps to: sld_rule
    """

    __sql_table__: ClassVar[str] = "sld_rule"
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
        "featuretype_id": "sld_featuretype(id)",
    }
    __sql_indexes__: ClassVar[List] = [
        ("idx_sld_rule_featuretype", ["featuretype_id"]),
    ]

    id: Optional[int] = None
    featuretype_id: int
    name: str = ""
    title: str = ""
    abstract: str = ""

    model_config = {"frozen": False}


__all__ = ["SldTemplate", "FeatureType", "Rule"]
