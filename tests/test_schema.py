# ============================================================================
# SCHEMA GENERATION TESTS
# ============================================================================
# STATUS: Tests - DDL generated from the Pydantic models
# PURPOSE: Verify tables, foreign keys, indexes, triggers and deployment errors
# CREATED: 18 OCT 2026
# ============================================================================
"""
Schema Generation Tests

Statements are rendered with as_string(None), no connection required.

Run with:
    pytest tests/test_schema.py -v
"""

import pytest
from unittest.mock import MagicMock, patch

import psycopg

from core.errors import DatabaseConnectionError, StatementError
from core.models import ConfigValue, ParamType, Param, SldTemplate
from core.schema import PydanticToSQL
from repositories.schema import deploy_schema


def _render(statements):
    return [stmt.as_string(None) for stmt in statements]


class TestTables:

    def test_all_tables_created(self):
        ddl = _render(PydanticToSQL().generate_all())

        creates = [s for s in ddl if s.startswith("CREATE TABLE")]
        assert len(creates) == 7
        for table in ("sld_template", "sld_featuretype", "sld_rule", "sld_type",
                      "sld_param", "sld_config", "sld_value"):
            assert any(f'"sld"."{table}"' in s for s in creates), table

    def test_parents_created_before_children(self):
        ddl = _render(PydanticToSQL().generate_all())
        creates = [s for s in ddl if s.startswith("CREATE TABLE")]

        order = [s.split("(")[0] for s in creates]
        assert order.index(next(o for o in order if "sld_rule" in o)) > order.index(
            next(o for o in order if "sld_featuretype" in o)
        )

    def test_serial_primary_key(self):
        stmt = PydanticToSQL().generate_table(SldTemplate).as_string(None)

        assert '"id" SERIAL' in stmt
        assert 'PRIMARY KEY ("id")' in stmt

    def test_unbounded_text_and_bounded_varchar(self):
        stmt = PydanticToSQL().generate_table(SldTemplate).as_string(None)

        assert '"content" TEXT' in stmt
        assert '"uuid" VARCHAR(64)' in stmt

    def test_foreign_keys_use_generator_schema(self):
        stmt = PydanticToSQL(schema_name="styles").generate_table(Param).as_string(None)

        assert 'REFERENCES "styles"."sld_rule" ("id") ON DELETE CASCADE' in stmt
        assert 'REFERENCES "styles"."sld_type" ("id")' in stmt

    def test_missing_table_name(self):
        class NoTable(SldTemplate):
            __sql_table__ = None

        with pytest.raises(ValueError):
            PydanticToSQL().generate_table(NoTable)


class TestIndexes:

    def test_unique_symbolizer_index_only_for_upsert(self):
        plain = " ".join(_render(PydanticToSQL().generate_indexes(ParamType)))
        upsert = " ".join(_render(PydanticToSQL(param_type_upsert=True).generate_indexes(ParamType)))

        assert "UNIQUE" not in plain
        assert "CREATE UNIQUE INDEX" in upsert
        assert '"symbolizer"' in upsert

    def test_config_value_pair_unique_without_upsert(self):
        ddl = " ".join(_render(PydanticToSQL().generate_indexes(ConfigValue)))

        assert "CREATE UNIQUE INDEX" in ddl
        assert '("config_id", "param_id")' in ddl

    def test_metadata_defaults(self):
        meta = PydanticToSQL.get_model_metadata(ParamType, "other")

        assert meta["table"] == "sld_type"
        assert meta["schema"] == "other"
        assert meta["primary_key"] == ["id"]


class TestSchemaStatements:

    def test_schema_and_search_path_first(self):
        ddl = _render(PydanticToSQL(schema_name="styles").generate_all())

        assert ddl[0] == 'CREATE SCHEMA IF NOT EXISTS "styles"'
        assert ddl[1].startswith('SET search_path TO "styles"')

    def test_updated_at_triggers(self):
        ddl = " ".join(_render(PydanticToSQL().generate_all()))

        assert "touch_updated_at" in ddl
        assert ddl.count("CREATE TRIGGER") == 2

    def test_table_comments(self):
        ddl = _render(PydanticToSQL().generate_all())
        assert sum(1 for s in ddl if s.startswith("COMMENT ON TABLE")) == 7

    def test_rebuild_drops_schema_first(self):
        generator = PydanticToSQL()

        with patch("core.schema.sql_generator.logger") as log:
            count = generator.execute(None, dry_run=True, rebuild=True)

        assert count == len(generator.generate_all()) + 1
        previews = [c.args[0] for c in log.info.call_args_list if "[DRY RUN]" in c.args[0]]
        assert "DROP SCHEMA" in previews[0]

    def test_execute_runs_every_statement(self):
        conn = MagicMock()
        cursor = conn.cursor.return_value.__enter__.return_value
        generator = PydanticToSQL()

        count = generator.execute(conn)

        assert cursor.execute.call_count == count


class TestDeploySchema:

    def test_dry_run_does_not_connect(self):
        with patch("repositories.schema.psycopg.connect") as connect:
            count = deploy_schema("postgresql://localhost/sld", dry_run=True)

        assert count > 0
        connect.assert_not_called()

    def test_connect_failure(self):
        with patch(
            "repositories.schema.psycopg.connect",
            side_effect=psycopg.OperationalError("connection refused"),
        ):
            with pytest.raises(DatabaseConnectionError):
                deploy_schema("postgresql://localhost/sld")

    def test_ddl_failure(self):
        conn = MagicMock()
        conn.__enter__.return_value = conn
        conn.cursor.return_value.__enter__.return_value.execute.side_effect = psycopg.ProgrammingError("syntax error")

        with patch("repositories.schema.psycopg.connect", return_value=conn):
            with pytest.raises(StatementError) as exc:
                deploy_schema("postgresql://localhost/sld")

        assert exc.value.operation == "deploy_schema"
