# ============================================================================
# PYDANTIC TO SQL GENERATOR
# ============================================================================
# STATUS: Core - DDL generation from Pydantic models
# PURPOSE: Generate PostgreSQL CREATE statements for the sld_* tables
# CREATED: 18 OCT 2026
# EXPORTS: PydanticToSQL
# DEPENDENCIES: pydantic, psycopg, annotated-types
# ============================================================================
"""
Pydantic to PostgreSQL Schema Generator.

Generates PostgreSQL DDL statements from Pydantic models.
Pydantic models are the SINGLE SOURCE OF TRUTH for schema.

Model Metadata Convention:
    Models define SQL metadata via ClassVar attributes:
    - __sql_table__: Table name
    - __sql_schema__: Schema name (optional, generator schema otherwise)
    - __sql_primary_key__: Primary key column(s) - string or list
    - __sql_foreign_keys__: Dict of {column: "table(column)"} or
      {column: "schema.table(column)"}
    - __sql_indexes__: List of index definitions
    - __sql_unique_indexes__: Unique indexes, always emitted
    - __sql_upsert_indexes__: Unique indexes emitted only for the
      upsert type-catalog policy
    - __sql_serial_columns__: Columns that should be SERIAL

Usage:
    generator = PydanticToSQL(schema_name="sld")
    statements = generator.generate_all()
    for stmt in statements:
        cursor.execute(stmt)
"""

import re
import logging
from typing import Any, Dict, List, Optional, Tuple, Type, Union, get_args, get_origin
from datetime import datetime
from pydantic import BaseModel
from pydantic.fields import FieldInfo
from psycopg import sql
from annotated_types import MaxLen

from core.schema.ddl_utils import IndexBuilder, TriggerBuilder, CommentBuilder, SchemaUtils

# Setup logger
logger = logging.getLogger(__name__)

FK_REFERENCE = re.compile(r"^(?:(\w+)\.)?(\w+)\((\w+)\)$")

# Tables with an updated_at column maintained by trigger
TIMESTAMPED_TABLES = ("sld_template", "sld_config")


class PydanticToSQL:
    """
    Builds the sld_* schema from the table models in core.models.

    Tables are emitted parents first so foreign keys resolve on a fresh database.
    """

    TYPE_MAP = {
        int: "INTEGER",
        float: "DOUBLE PRECISION",
        bool: "BOOLEAN",
        datetime: "TIMESTAMPTZ",
        dict: "JSONB",
        list: "JSONB",
    }

    def __init__(self, schema_name: str = "sld", param_type_upsert: bool = False):
        """
        Initialize the generator.

        Args:
            schema_name: Default PostgreSQL schema name
            param_type_upsert: If True, emit the unique symbolizer index the
                               type resolver's ON CONFLICT insert relies on.
        """
        self.schema_name = schema_name
        self.param_type_upsert = param_type_upsert

    # =========================================================================
    # METADATA EXTRACTION
    # =========================================================================

    @staticmethod
    def get_model_metadata(model: Type[BaseModel], default_schema: str = "sld") -> Dict[str, Any]:
        """
        Extract SQL DDL metadata from a Pydantic model.

        Args:
            model: Pydantic model class
            default_schema: Schema used when the model does not name one

        Returns:
            Dict with table, schema, primary_key, foreign_keys, indexes,
            unique_indexes, upsert_indexes, serial_columns
        """
        def get_attr(name: str, default=None):
            return getattr(model, f"__{name}__", default)

        metadata = {
            "table": get_attr("sql_table"),
            "schema": get_attr("sql_schema", default_schema),
            "primary_key": get_attr("sql_primary_key", []),
            "foreign_keys": get_attr("sql_foreign_keys", {}),
            "indexes": get_attr("sql_indexes", []),
            "unique_indexes": get_attr("sql_unique_indexes", []),
            "upsert_indexes": get_attr("sql_upsert_indexes", []),
            "serial_columns": get_attr("sql_serial_columns", []),
        }

        # Normalize primary_key to list
        if isinstance(metadata["primary_key"], str):
            metadata["primary_key"] = [metadata["primary_key"]]

        return metadata

    # =========================================================================
    # TYPE CONVERSION
    # =========================================================================

    @staticmethod
    def _unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
        """Return (inner type, nullable) for Optional[X]; other annotations pass through."""
        if get_origin(annotation) is Union:
            members = [arg for arg in get_args(annotation) if arg is not type(None)]
            if len(members) == 1:
                return members[0], True
        return annotation, False

    def python_type_to_sql(self, field_type: Any, field_info: FieldInfo) -> str:
        """
        PostgreSQL type for a model field.

        Strings with a max_length become VARCHAR(n), other strings TEXT.
        Containers and unknown types fall back to JSONB.
        """
        actual, _ = self._unwrap_optional(field_type)

        if actual is str:
            limits = [m.max_length for m in field_info.metadata if isinstance(m, MaxLen)]
            return f"VARCHAR({limits[0]})" if limits else "TEXT"

        if get_origin(actual) in (dict, list):
            return "JSONB"
        return self.TYPE_MAP.get(actual, "JSONB")

    def _column(self, name: str, field_info: FieldInfo, meta: Dict[str, Any]) -> sql.Composed:
        if name in meta["serial_columns"]:
            return sql.SQL("{} SERIAL").format(sql.Identifier(name))

        _, nullable = self._unwrap_optional(field_info.annotation)
        parts = [sql.Identifier(name), sql.SQL(self.python_type_to_sql(field_info.annotation, field_info))]

        if not nullable and name not in meta["primary_key"]:
            parts.append(sql.SQL("NOT NULL"))

        default = field_info.default
        if name in ("created_at", "updated_at"):
            parts.append(sql.SQL("DEFAULT NOW()"))
        elif isinstance(default, bool):
            parts.append(sql.SQL("DEFAULT TRUE" if default else "DEFAULT FALSE"))
        elif isinstance(default, (str, int, float)):
            parts.append(sql.SQL("DEFAULT {}").format(sql.Literal(default)))

        return sql.SQL(" ").join(parts)

    def _foreign_key(self, fk_column: str, fk_reference: str) -> Optional[sql.Composed]:
        match = FK_REFERENCE.match(fk_reference)
        if not match:
            logger.warning(f"Skipping unparseable foreign key {fk_column} -> {fk_reference}")
            return None

        ref_schema, ref_table, ref_column = match.groups()
        return sql.SQL("FOREIGN KEY ({}) REFERENCES {}.{} ({}) ON DELETE CASCADE").format(
            sql.Identifier(fk_column),
            sql.Identifier(ref_schema or self.schema_name),
            sql.Identifier(ref_table),
            sql.Identifier(ref_column)
        )

    # =========================================================================
    # TABLE GENERATION
    # =========================================================================

    def generate_table(self, model: Type[BaseModel]) -> sql.Composed:
        """CREATE TABLE IF NOT EXISTS for one model; raises ValueError without __sql_table__."""
        meta = self.get_model_metadata(model, self.schema_name)
        if not meta["table"]:
            raise ValueError(f"Model {model.__name__} missing __sql_table__ attribute")

        logger.debug(f"Generating table {meta['schema']}.{meta['table']} from {model.__name__}")

        body = [self._column(name, info, meta) for name, info in model.model_fields.items()]

        if meta["primary_key"]:
            body.append(sql.SQL("PRIMARY KEY ({})").format(
                sql.SQL(", ").join(map(sql.Identifier, meta["primary_key"]))
            ))

        for fk_column, fk_reference in meta["foreign_keys"].items():
            constraint = self._foreign_key(fk_column, fk_reference)
            if constraint is not None:
                body.append(constraint)

        return sql.SQL("CREATE TABLE IF NOT EXISTS {}.{} ({})").format(
            sql.Identifier(meta["schema"]),
            sql.Identifier(meta["table"]),
            sql.SQL(", ").join(body),
        )

    # =========================================================================
    # INDEX GENERATION
    # =========================================================================

    def generate_indexes(self, model: Type[BaseModel]) -> List[sql.Composed]:
        """
        Generate CREATE INDEX statements from a model's __sql_indexes__.

        Unique indexes are always included; upsert indexes only when
        param_type_upsert is set.

        Args:
            model: Pydantic model with __sql_indexes__ attribute

        Returns:
            List of sql.Composed CREATE INDEX statements
        """
        meta = self.get_model_metadata(model, self.schema_name)
        table_name = meta["table"]
        schema_name = meta["schema"]

        result = []

        for idx_def in meta["indexes"]:
            # (name, columns) or (name, columns, partial_where)
            name = idx_def[0]
            columns = idx_def[1] if len(idx_def) > 1 else []
            partial_where = idx_def[2] if len(idx_def) > 2 else None
            if not columns or not name:
                continue
            result.append(IndexBuilder.btree(
                schema_name, table_name, columns,
                name=name,
                partial_where=partial_where,
            ))

        unique = list(meta["unique_indexes"])
        if self.param_type_upsert:
            unique.extend(meta["upsert_indexes"])
        for name, columns in unique:
            result.append(IndexBuilder.unique(schema_name, table_name, columns, name=name))

        return result

    # =========================================================================
    # COMPLETE SCHEMA GENERATION
    # =========================================================================

    def generate_drop_schema(self) -> sql.Composed:
        """
        Generate DROP SCHEMA CASCADE statement.

        WARNING: This destroys ALL data in the schema!
        Only use for development rebuild.
        """
        return sql.SQL("DROP SCHEMA IF EXISTS {} CASCADE").format(
            sql.Identifier(self.schema_name)
        )

    @staticmethod
    def models() -> List[Type[BaseModel]]:
        """All table models, parents before children."""
        from core.models import (
            SldTemplate, FeatureType, Rule, ParamType, Param, SldConfig, ConfigValue,
        )
        return [SldTemplate, FeatureType, Rule, ParamType, Param, SldConfig, ConfigValue]

    def generate_all(self) -> List[sql.Composed]:
        """
        Generate complete DDL for the SLD store.

        Returns:
            List of sql.Composed statements ready for execution
        """
        models = self.models()
        statements = [
            SchemaUtils.create_schema(self.schema_name),
            SchemaUtils.set_search_path(self.schema_name),
        ]

        for model in models:
            statements.append(self.generate_table(model))
            if model.__doc__:
                summary = model.__doc__.strip().splitlines()[0]
                statements.append(
                    CommentBuilder.table(self.schema_name, model.__sql_table__, summary)
                )

        for model in models:
            statements.extend(self.generate_indexes(model))

        statements.append(TriggerBuilder.updated_at_function(self.schema_name))
        for table in TIMESTAMPED_TABLES:
            statements.extend(TriggerBuilder.updated_at_trigger(self.schema_name, table))

        logger.info(f"Generated {len(statements)} DDL statements for schema {self.schema_name}")
        return statements

    def execute(self, conn, dry_run: bool = False, rebuild: bool = False) -> int:
        """
        Execute all DDL statements.

        Args:
            conn: psycopg connection (None is accepted for a dry run)
            dry_run: If True, log statements but don't execute
            rebuild: If True, drop the schema first

        Returns:
            Number of statements executed
        """
        statements = self.generate_all()
        if rebuild:
            statements.insert(0, self.generate_drop_schema())

        if dry_run:
            for stmt in statements:
                logger.info(f"[DRY RUN] {stmt.as_string(conn)[:100]}...")
            return len(statements)

        with conn.cursor() as cur:
            for stmt in statements:
                cur.execute(stmt)

        logger.info(f"Executed {len(statements)} DDL statements")
        return len(statements)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ['PydanticToSQL']
