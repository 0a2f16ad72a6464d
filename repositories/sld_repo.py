# ============================================================================
# SLD REPOSITORY
# ============================================================================
# STATUS: Domain - Statements for the sld_* tables
# PURPOSE: Inserts, deletes and reads run inside a caller's UnitOfWork
# CREATED: 18 OCT 2026
# ============================================================================
"""
SLD Repository

Every method runs on the UnitOfWork it was built with; the repository never
opens, commits or rolls back anything itself. One repository instance lives
exactly as long as one unit of work.

All SQL uses psycopg sql.SQL composition for injection safety.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from psycopg import sql

from core.errors import StatementError
from core.models import SldTemplate, FeatureType, SldConfig, ConfigValue
from .database import (
    TABLE_TEMPLATES,
    TABLE_FEATURETYPES,
    TABLE_RULES,
    TABLE_PARAM_TYPES,
    TABLE_PARAMS,
    TABLE_CONFIGS,
    TABLE_VALUES,
)
from .unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

TEMPLATE_COLUMNS = ["id", "name", "uuid", "sld_filename", "wms_url", "created_at", "updated_at"]


class SldRepository:
    """Repository for templates, their hierarchy, the type catalog and config values."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @contextmanager
    def _error_context(self, operation: str, entity_id: Optional[Any] = None, **context):
        """
        Relabel statement failures with the repository operation.

        Extra keyword context (line_number, kind, param_id) is carried onto
        the raised StatementError.
        """
        try:
            yield
        except StatementError as e:
            error_msg = f"{operation} failed"
            if entity_id is not None:
                error_msg += f" for {entity_id}"
            error_msg += f": {e}"
            logger.error(error_msg)
            raise StatementError(
                error_msg,
                operation=operation,
                entity_id=str(entity_id) if entity_id is not None else None,
                line_number=context.get("line_number", e.line_number),
                kind=context.get("kind", e.kind),
                param_id=context.get("param_id", e.param_id),
            ) from e

    # =========================================================================
    # TEMPLATE HIERARCHY
    # =========================================================================

    async def insert_template(self, template: SldTemplate) -> int:
        """Insert a template row, return its id."""
        with self._error_context("insert_template", template.name):
            row = await self.uow.query_one(
                sql.SQL("""
                    INSERT INTO {} (name, content, uuid, sld_filename, wms_url)
                    VALUES (%(name)s, %(content)s, %(uuid)s, %(sld_filename)s, %(wms_url)s)
                    RETURNING id
                """).format(TABLE_TEMPLATES),
                {
                    "name": template.name,
                    "content": template.content,
                    "uuid": template.uuid,
                    "sld_filename": template.sld_filename,
                    "wms_url": template.wms_url,
                },
            )
        logger.debug(f"Inserted template {row['id']} ({template.name})")
        return row["id"]

    async def insert_feature_type(self, template_id: int, name: str = "", title: str = "") -> int:
        """Insert a feature type under a template, return its id."""
        with self._error_context("insert_feature_type", template_id):
            row = await self.uow.query_one(
                sql.SQL("""
                    INSERT INTO {} (template_id, name, title, featuretype_name)
                    VALUES (%s, %s, %s, '')
                    RETURNING id
                """).format(TABLE_FEATURETYPES),
                (template_id, name, title),
            )
        return row["id"]

    async def insert_rule(
        self,
        featuretype_id: int,
        name: str = "",
        title: str = "",
        abstract: str = "",
    ) -> int:
        """Insert a rule under a feature type, return its id."""
        with self._error_context("insert_rule", featuretype_id):
            row = await self.uow.query_one(
                sql.SQL("""
                    INSERT INTO {} (featuretype_id, name, title, abstract)
                    VALUES (%s, %s, %s, %s)
                    RETURNING id
                """).format(TABLE_RULES),
                (featuretype_id, name, title, abstract),
            )
        return row["id"]

    async def insert_param(
        self,
        rule_id: int,
        template_offset: int,
        type_id: int,
        default_value: str = "",
    ) -> int:
        """Insert a parameter under a rule, return its id."""
        with self._error_context("insert_param", rule_id):
            row = await self.uow.query_one(
                sql.SQL("""
                    INSERT INTO {} (rule_id, template_offset, type_id, default_value)
                    VALUES (%s, %s, %s, %s)
                    RETURNING id
                """).format(TABLE_PARAMS),
                (rule_id, template_offset, type_id, default_value),
            )
        return row["id"]

    # =========================================================================
    # TYPE CATALOG
    # =========================================================================

    async def find_param_type(self, symbolizer: str) -> Optional[int]:
        """Lowest id of the catalog rows with this symbolizer, or None."""
        with self._error_context("find_param_type", symbolizer):
            row = await self.uow.query_optional(
                sql.SQL(
                    "SELECT id FROM {} WHERE symbolizer = %s ORDER BY id LIMIT 1"
                ).format(TABLE_PARAM_TYPES),
                (symbolizer,),
            )
        return row["id"] if row else None

    async def insert_param_type(self, symbolizer: str) -> int:
        """Append a catalog row with an empty name."""
        with self._error_context("insert_param_type", symbolizer):
            row = await self.uow.query_one(
                sql.SQL(
                    "INSERT INTO {} (name, symbolizer) VALUES ('', %s) RETURNING id"
                ).format(TABLE_PARAM_TYPES),
                (symbolizer,),
            )
        logger.info(f"Added parameter type {row['id']} for {symbolizer}")
        return row["id"]

    async def upsert_param_type(self, symbolizer: str) -> Optional[int]:
        """
        Insert a catalog row unless the symbolizer already exists.

        Requires the unique symbolizer index. Returns None when the row
        already existed.
        """
        with self._error_context("upsert_param_type", symbolizer):
            row = await self.uow.query_optional(
                sql.SQL("""
                    INSERT INTO {} (name, symbolizer) VALUES ('', %s)
                    ON CONFLICT (symbolizer) DO NOTHING
                    RETURNING id
                """).format(TABLE_PARAM_TYPES),
                (symbolizer,),
            )
        return row["id"] if row else None

    # =========================================================================
    # CONFIG VALUES
    # =========================================================================

    async def delete_config_values(self, config_id: int) -> int:
        """Delete every value row of a config, return the count removed."""
        with self._error_context("delete_config_values", config_id):
            return await self.uow.execute(
                sql.SQL("DELETE FROM {} WHERE config_id = %s").format(TABLE_VALUES),
                (config_id,),
            )

    async def insert_config_value(self, config_id: int, param_id: int, value: str) -> int:
        """Insert one value row, return its id."""
        with self._error_context("insert_config_value", config_id, param_id=param_id):
            row = await self.uow.query_one(
                sql.SQL("""
                    INSERT INTO {} (config_id, param_id, value)
                    VALUES (%s, %s, %s)
                    RETURNING id
                """).format(TABLE_VALUES),
                (config_id, param_id, value),
            )
        return row["id"]

    # =========================================================================
    # READS
    # =========================================================================

    def _template_columns(self, include_content: bool) -> sql.Composable:
        columns = TEMPLATE_COLUMNS + (["content"] if include_content else [])
        return sql.SQL(", ").join(sql.Identifier(c) for c in columns)

    async def get_template(self, template_id: int, include_content: bool = False) -> SldTemplate:
        """
        One template by id.

        Raises:
            NotFoundError: No template with this id
        """
        with self._error_context("get_template", template_id):
            row = await self.uow.query_one(
                sql.SQL("SELECT {} FROM {} WHERE id = %s").format(
                    self._template_columns(include_content), TABLE_TEMPLATES
                ),
                (template_id,),
            )
        return self._row_to_template(row)

    async def list_templates(self, include_content: bool = False) -> List[SldTemplate]:
        """All templates ordered by id."""
        with self._error_context("list_templates"):
            rows = await self.uow.query_many(
                sql.SQL("SELECT {} FROM {} ORDER BY id").format(
                    self._template_columns(include_content), TABLE_TEMPLATES
                ),
            )
        return [self._row_to_template(row) for row in rows]

    async def get_feature_types(self, template_id: int) -> List[FeatureType]:
        """Feature types of a template in insertion order."""
        with self._error_context("get_feature_types", template_id):
            rows = await self.uow.query_many(
                sql.SQL(
                    "SELECT * FROM {} WHERE template_id = %s ORDER BY id"
                ).format(TABLE_FEATURETYPES),
                (template_id,),
            )
        return [FeatureType(**row) for row in rows]

    async def get_config(self, config_id: int) -> Optional[SldConfig]:
        """A config row, or None when it does not exist."""
        with self._error_context("get_config", config_id):
            row = await self.uow.query_optional(
                sql.SQL("SELECT * FROM {} WHERE id = %s").format(TABLE_CONFIGS),
                (config_id,),
            )
        return SldConfig(**row) if row else None

    async def get_config_values(self, config_id: int) -> List[ConfigValue]:
        """Current value rows of a config ordered by id."""
        with self._error_context("get_config_values", config_id):
            rows = await self.uow.query_many(
                sql.SQL(
                    "SELECT * FROM {} WHERE config_id = %s ORDER BY id"
                ).format(TABLE_VALUES),
                (config_id,),
            )
        return [ConfigValue(**row) for row in rows]

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _row_to_template(row: Dict[str, Any]) -> SldTemplate:
        """Convert database row to SldTemplate; content stays None unless selected."""
        return SldTemplate(
            id=row["id"],
            name=row["name"],
            content=row.get("content"),
            uuid=row.get("uuid"),
            sld_filename=row.get("sld_filename"),
            wms_url=row.get("wms_url"),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


__all__ = ["SldRepository", "TEMPLATE_COLUMNS"]
