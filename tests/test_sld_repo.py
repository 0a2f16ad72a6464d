# ============================================================================
# SLD REPOSITORY TESTS
# ============================================================================
# STATUS: Tests - Statements and row mapping of SldRepository
# PURPOSE: Verify SQL targets, parameters and error relabelling
# CREATED: 18 OCT 2026
# ============================================================================
"""
SldRepository Tests

The unit of work is an AsyncMock; assertions look at the composed
statement (via repr) and the parameters handed to it.

Run with:
    pytest tests/test_sld_repo.py -v
"""

import asyncio
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from core.errors import NotFoundError, StatementError
from core.models import SldTemplate
from repositories.sld_repo import SldRepository


# ============================================================================
# HELPERS
# ============================================================================

def _build_repo(one=None, optional=None, many=None, rowcount=0):
    """SldRepository over a mocked unit of work."""
    uow = MagicMock()
    uow.query_one = AsyncMock(return_value=one if one is not None else {"id": 1})
    uow.query_optional = AsyncMock(return_value=optional)
    uow.query_many = AsyncMock(return_value=many or [])
    uow.execute = AsyncMock(return_value=rowcount)
    return SldRepository(uow), uow


def _template_row(template_id=1, **overrides):
    now = datetime.now(timezone.utc)
    row = {
        "id": template_id,
        "name": "roads",
        "uuid": "owner-1",
        "sld_filename": "roads.sld",
        "wms_url": None,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


# ============================================================================
# HIERARCHY INSERTS
# ============================================================================

class TestHierarchyInserts:

    def test_insert_template(self):
        repo, uow = _build_repo(one={"id": 42})
        template = SldTemplate(name="roads", content="<sld>${0}</sld>", uuid="u-1", sld_filename="roads.sld")

        template_id = asyncio.run(repo.insert_template(template))

        assert template_id == 42
        query, params = uow.query_one.await_args.args
        assert "sld_template" in repr(query)
        assert "RETURNING id" in repr(query)
        assert params["name"] == "roads"
        assert params["content"] == "<sld>${0}</sld>"
        assert params["uuid"] == "u-1"
        assert params["sld_filename"] == "roads.sld"

    def test_insert_feature_type(self):
        repo, uow = _build_repo(one={"id": 5})

        assert asyncio.run(repo.insert_feature_type(42)) == 5

        query, params = uow.query_one.await_args.args
        assert "sld_featuretype" in repr(query)
        assert params == (42, "", "")

    def test_insert_rule(self):
        repo, uow = _build_repo(one={"id": 6})

        assert asyncio.run(repo.insert_rule(5, "R", "Title", "Abstract")) == 6

        query, params = uow.query_one.await_args.args
        assert "sld_rule" in repr(query)
        assert params == (5, "R", "Title", "Abstract")

    def test_insert_param(self):
        repo, uow = _build_repo(one={"id": 7})

        assert asyncio.run(repo.insert_param(6, 3, 2, "#ff0000")) == 7

        query, params = uow.query_one.await_args.args
        assert "sld_param" in repr(query)
        assert params == (6, 3, 2, "#ff0000")


# ============================================================================
# TYPE CATALOG
# ============================================================================

class TestTypeCatalog:

    def test_find_existing(self):
        repo, uow = _build_repo(optional={"id": 3})

        assert asyncio.run(repo.find_param_type("point-color")) == 3

        query, params = uow.query_optional.await_args.args
        assert "sld_type" in repr(query)
        assert "ORDER BY id LIMIT 1" in repr(query)
        assert params == ("point-color",)

    def test_find_missing(self):
        repo, _ = _build_repo(optional=None)
        assert asyncio.run(repo.find_param_type("point-color")) is None

    def test_insert_type_with_empty_name(self):
        repo, uow = _build_repo(one={"id": 8})

        assert asyncio.run(repo.insert_param_type("stroke-width")) == 8

        query, params = uow.query_one.await_args.args
        assert "VALUES ('', %s)" in repr(query)
        assert params == ("stroke-width",)

    def test_upsert_conflict_returns_none(self):
        repo, uow = _build_repo(optional=None)

        assert asyncio.run(repo.upsert_param_type("point-color")) is None

        query, _ = uow.query_optional.await_args.args
        assert "ON CONFLICT (symbolizer) DO NOTHING" in repr(query)


# ============================================================================
# CONFIG VALUES
# ============================================================================

class TestConfigValues:

    def test_delete_returns_rowcount(self):
        repo, uow = _build_repo(rowcount=4)

        assert asyncio.run(repo.delete_config_values(9)) == 4

        query, params = uow.execute.await_args.args
        assert "DELETE FROM" in repr(query)
        assert "sld_value" in repr(query)
        assert params == (9,)

    def test_insert_value(self):
        repo, uow = _build_repo(one={"id": 11})

        assert asyncio.run(repo.insert_config_value(9, 7, "5")) == 11

        _, params = uow.query_one.await_args.args
        assert params == (9, 7, "5")

    def test_insert_failure_carries_param_id(self):
        repo, uow = _build_repo()
        uow.query_one = AsyncMock(side_effect=StatementError("fk violation", operation="query"))

        with pytest.raises(StatementError) as exc:
            asyncio.run(repo.insert_config_value(9, 7, "5"))

        assert exc.value.operation == "insert_config_value"
        assert exc.value.entity_id == "9"
        assert exc.value.param_id == 7
        assert isinstance(exc.value.__cause__, StatementError)


# ============================================================================
# READS
# ============================================================================

class TestReads:

    def test_get_template_without_content(self):
        repo, uow = _build_repo(one=_template_row(3))

        template = asyncio.run(repo.get_template(3))

        assert template.id == 3
        assert template.content is None
        query, params = uow.query_one.await_args.args
        assert "content" not in repr(query)
        assert params == (3,)

    def test_get_template_with_content(self):
        repo, uow = _build_repo(one=_template_row(3, content="<sld/>"))

        template = asyncio.run(repo.get_template(3, include_content=True))

        assert template.content == "<sld/>"
        query, _ = uow.query_one.await_args.args
        assert "content" in repr(query)

    def test_get_template_missing_is_not_found(self):
        repo, uow = _build_repo()
        uow.query_one = AsyncMock(side_effect=NotFoundError("Query returned no rows", operation="query_one"))

        with pytest.raises(NotFoundError):
            asyncio.run(repo.get_template(99))

    def test_list_templates(self):
        repo, _ = _build_repo(many=[_template_row(1), _template_row(2, name="rivers")])

        templates = asyncio.run(repo.list_templates())

        assert [t.id for t in templates] == [1, 2]
        assert templates[1].name == "rivers"

    def test_get_feature_types(self):
        rows = [
            {"id": 1, "template_id": 4, "name": "", "title": "", "featuretype_name": ""},
            {"id": 2, "template_id": 4, "name": "", "title": "", "featuretype_name": ""},
        ]
        repo, uow = _build_repo(many=rows)

        feature_types = asyncio.run(repo.get_feature_types(4))

        assert [ft.id for ft in feature_types] == [1, 2]
        query, params = uow.query_many.await_args.args
        assert "ORDER BY id" in repr(query)
        assert params == (4,)

    def test_get_config_missing(self):
        repo, _ = _build_repo(optional=None)
        assert asyncio.run(repo.get_config(5)) is None

    def test_get_config(self):
        now = datetime.now(timezone.utc)
        row = {
            "id": 5, "template_id": 1, "uuid": "owner-1", "name": "mine",
            "output_path": None, "created_at": now, "updated_at": now,
        }
        repo, _ = _build_repo(optional=row)

        config = asyncio.run(repo.get_config(5))

        assert config.uuid == "owner-1"
        assert config.template_id == 1

    def test_get_config_values(self):
        rows = [{"id": 1, "config_id": 5, "param_id": 7, "value": "9"}]
        repo, _ = _build_repo(many=rows)

        values = asyncio.run(repo.get_config_values(5))

        assert values[0].param_id == 7
        assert values[0].value == "9"
