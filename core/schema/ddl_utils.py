# ============================================================================
# DDL UTILITIES
# ============================================================================
# STATUS: Core - Statement builders for the sld schema
# PURPOSE: Index, trigger, comment and schema statements as psycopg.sql objects
# CREATED: 18 OCT 2026
# EXPORTS: IndexBuilder, TriggerBuilder, CommentBuilder, SchemaUtils
# DEPENDENCIES: psycopg
# ============================================================================
"""
DDL Utilities

Small builders used by PydanticToSQL. Every identifier goes through
sql.Identifier and every literal through sql.Literal; nothing is formatted
into SQL text.

Usage:
    from core.schema.ddl_utils import IndexBuilder, TriggerBuilder

    IndexBuilder.btree("sld", "sld_param", ["rule_id"])
    TriggerBuilder.updated_at_trigger("sld", "sld_config")
"""

from typing import List, Optional, Sequence, Union

from psycopg import sql

Columns = Union[str, Sequence[str]]

# Trigger function shared by every table with an updated_at column
TOUCH_FUNCTION = "touch_updated_at"


def _qualified(schema: str, name: str) -> sql.Composed:
    return sql.SQL("{}.{}").format(sql.Identifier(schema), sql.Identifier(name))


def _column_list(columns: Columns) -> List[str]:
    return [columns] if isinstance(columns, str) else list(columns)


class IndexBuilder:
    """CREATE [UNIQUE] INDEX statements, named idx_<table>_<columns> unless given a name."""

    @staticmethod
    def _create(
        schema: str,
        table: str,
        columns: Columns,
        name: Optional[str],
        unique: bool,
        partial_where: Optional[str] = None,
    ) -> sql.Composed:
        cols = _column_list(columns)
        prefix = "idx_unique" if unique else "idx"
        index_name = name or f"{prefix}_{table}_{'_'.join(cols)}"

        stmt = sql.SQL("CREATE {kind} IF NOT EXISTS {name} ON {table} ({columns})").format(
            kind=sql.SQL("UNIQUE INDEX" if unique else "INDEX"),
            name=sql.Identifier(index_name),
            table=_qualified(schema, table),
            columns=sql.SQL(", ").join(sql.Identifier(c) for c in cols),
        )
        if partial_where:
            stmt = sql.SQL("{} WHERE {}").format(stmt, sql.SQL(partial_where))
        return stmt

    @staticmethod
    def btree(
        schema: str,
        table: str,
        columns: Columns,
        name: Optional[str] = None,
        partial_where: Optional[str] = None,
    ) -> sql.Composed:
        """Plain lookup index, optionally partial."""
        return IndexBuilder._create(schema, table, columns, name, unique=False, partial_where=partial_where)

    @staticmethod
    def unique(schema: str, table: str, columns: Columns, name: Optional[str] = None) -> sql.Composed:
        """Unique index; the arbiter for INSERT ... ON CONFLICT on these columns."""
        return IndexBuilder._create(schema, table, columns, name, unique=True)


class TriggerBuilder:
    """Keeps updated_at current on UPDATE."""

    @staticmethod
    def updated_at_function(schema: str) -> sql.Composed:
        return sql.SQL(
            "CREATE OR REPLACE FUNCTION {function}() RETURNS TRIGGER LANGUAGE plpgsql AS "
            "$$ BEGIN NEW.updated_at = NOW(); RETURN NEW; END; $$"
        ).format(function=_qualified(schema, TOUCH_FUNCTION))

    @staticmethod
    def updated_at_trigger(schema: str, table: str) -> List[sql.Composed]:
        """DROP then CREATE, so redeploying the schema is idempotent."""
        trigger = sql.Identifier(f"trg_{table}_updated_at")
        target = _qualified(schema, table)
        return [
            sql.SQL("DROP TRIGGER IF EXISTS {} ON {}").format(trigger, target),
            sql.SQL(
                "CREATE TRIGGER {} BEFORE UPDATE ON {} FOR EACH ROW EXECUTE FUNCTION {}()"
            ).format(trigger, target, _qualified(schema, TOUCH_FUNCTION)),
        ]


class CommentBuilder:

    @staticmethod
    def table(schema: str, table: str, comment: str) -> sql.Composed:
        return sql.SQL("COMMENT ON TABLE {} IS {}").format(_qualified(schema, table), sql.Literal(comment))


class SchemaUtils:

    @staticmethod
    def create_schema(schema: str) -> sql.Composed:
        return sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(schema))

    @staticmethod
    def set_search_path(schema: str) -> sql.Composed:
        """Schema first, public kept for extensions."""
        return sql.SQL("SET search_path TO {}, public").format(sql.Identifier(schema))


__all__ = [
    "IndexBuilder",
    "TriggerBuilder",
    "CommentBuilder",
    "SchemaUtils",
]
