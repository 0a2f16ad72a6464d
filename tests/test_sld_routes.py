# ============================================================================
# SLD ROUTES TESTS
# ============================================================================
# STATUS: Tests - HTTP surface of the SLD store
# PURPOSE: Verify status codes and error mapping of api/sld_routes.py
# CREATED: 18 OCT 2026
# ============================================================================
"""
SLD Routes Tests

Uses FastAPI TestClient with a mocked SldService.

Run with:
    pytest tests/test_sld_routes.py -v
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.errors import (
    DatabaseConnectionError,
    DuplicateParamError,
    NotFoundError,
    OrphanFieldError,
    StatementError,
)
from core.models import ConfigValue, FeatureType, SldConfig, SldTemplate
from services import LoadResult

from api.sld_routes import router, set_sld_services


# ============================================================================
# FIXTURES
# ============================================================================

def _make_test_app(sld_service_mock):
    """Create a test FastAPI app with SLD routes and mocked service."""
    app = FastAPI()
    app.include_router(router, prefix="/api/v1")
    set_sld_services(sld_service_mock)
    return app


def _make_service():
    svc = MagicMock()
    svc.ingest_template = AsyncMock(return_value=LoadResult(template_id=1, feature_types=1, rules=1, params=1))
    svc.get_template = AsyncMock()
    svc.get_template_tree = AsyncMock(return_value=[])
    svc.get_feature_types = AsyncMock(return_value=[])
    svc.get_config = AsyncMock(return_value=None)
    svc.check_config_ownership = AsyncMock(return_value=True)
    svc.replace_config_values = AsyncMock(return_value=0)
    svc.get_config_values = AsyncMock(return_value=[])
    return svc


@pytest.fixture
def svc():
    service = _make_service()
    yield service
    set_sld_services(None)


@pytest.fixture
def client(svc):
    return TestClient(_make_test_app(svc))


INGEST_BODY = {
    "name": "roads",
    "content": "<sld>${0}</sld>",
    "lines": ["FeatureType", "Rule\tR", "Field\t\t\t0\tfill\t#000"],
    "uuid": "owner-1",
}


# ============================================================================
# TEMPLATES
# ============================================================================

class TestIngestTemplate:

    def test_created(self, client, svc):
        resp = client.post("/api/v1/sld/templates", json=INGEST_BODY)

        assert resp.status_code == 201
        assert resp.json() == {"template_id": 1, "feature_types": 1, "rules": 1, "params": 1}
        kwargs = svc.ingest_template.await_args.kwargs
        assert kwargs["name"] == "roads"
        assert kwargs["lines"] == INGEST_BODY["lines"]
        assert kwargs["uuid"] == "owner-1"

    def test_orphan_is_422_with_line(self, client, svc):
        svc.ingest_template.side_effect = OrphanFieldError("Line 2: Field with no current Rule", line_number=2, kind="Field")

        resp = client.post("/api/v1/sld/templates", json=INGEST_BODY)

        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert detail["error"] == "OrphanFieldError"
        assert detail["line_number"] == 2

    def test_statement_failure_is_500(self, client, svc):
        svc.ingest_template.side_effect = StatementError("fk violation", operation="ingest_template", line_number=3)

        resp = client.post("/api/v1/sld/templates", json=INGEST_BODY)

        assert resp.status_code == 500
        assert resp.json()["detail"] == "Database operation failed"

    def test_database_down_is_503(self, client, svc):
        svc.ingest_template.side_effect = DatabaseConnectionError("refused", operation="begin")

        resp = client.post("/api/v1/sld/templates", json=INGEST_BODY)

        assert resp.status_code == 503

    def test_missing_name_rejected(self, client, svc):
        resp = client.post("/api/v1/sld/templates", json={"content": "<sld/>"})

        assert resp.status_code == 422
        svc.ingest_template.assert_not_awaited()

    @pytest.mark.parametrize("field, limit", [("uuid", 64), ("sld_filename", 255), ("wms_url", 500)])
    def test_overlong_attribute_rejected(self, client, svc, field, limit):
        resp = client.post("/api/v1/sld/templates", json={**INGEST_BODY, field: "x" * (limit + 1)})

        assert resp.status_code == 422
        svc.ingest_template.assert_not_awaited()


class TestTemplateReads:

    def test_list_omits_content(self, client, svc):
        svc.get_template.return_value = [SldTemplate(id=1, name="a", content="<a/>")]

        resp = client.get("/api/v1/sld/templates")

        assert resp.status_code == 200
        body = resp.json()
        assert body[0]["name"] == "a"
        assert "content" not in body[0]
        assert svc.get_template.await_args.args == (None,)

    def test_list_with_content(self, client, svc):
        svc.get_template.return_value = [SldTemplate(id=1, name="a", content="<a/>")]

        resp = client.get("/api/v1/sld/templates", params={"include_content": "true"})

        assert resp.json()[0]["content"] == "<a/>"

    def test_get_one(self, client, svc):
        svc.get_template.return_value = SldTemplate(id=3, name="roads", uuid=None)

        resp = client.get("/api/v1/sld/templates/3")

        assert resp.status_code == 200
        assert resp.json()["id"] == 3
        assert resp.json()["uuid"] is None

    def test_get_missing(self, client, svc):
        svc.get_template.side_effect = NotFoundError("Query returned no rows", operation="query_one")

        resp = client.get("/api/v1/sld/templates/3")

        assert resp.status_code == 404

    def test_non_positive_id_is_404(self, client, svc):
        resp = client.get("/api/v1/sld/templates/0")

        assert resp.status_code == 404
        svc.get_template.assert_not_awaited()

    def test_tree(self, client, svc):
        svc.get_template_tree.return_value = [{"id": 1, "name": "a", "featuretypes": []}]

        resp = client.get("/api/v1/sld/templates/tree", params={"template_id": 1})

        assert resp.status_code == 200
        assert resp.json()[0]["featuretypes"] == []
        svc.get_template_tree.assert_awaited_once_with(1)

    def test_feature_types(self, client, svc):
        svc.get_feature_types.return_value = [FeatureType(id=4, template_id=1)]

        resp = client.get("/api/v1/sld/templates/1/featuretypes")

        assert resp.status_code == 200
        assert resp.json()[0]["id"] == 4


# ============================================================================
# CONFIGS
# ============================================================================

class TestReplaceConfigValues:

    def test_replaced(self, client, svc):
        svc.replace_config_values.return_value = 2
        body = {"uuid": "owner-1", "values": [{"param_id": 1, "value": "a"}, {"param_id": 2, "value": 5}]}

        resp = client.put("/api/v1/sld/configs/9/values", json=body)

        assert resp.status_code == 200
        assert resp.json() == {"config_id": 9, "value_count": 2}
        svc.check_config_ownership.assert_awaited_once_with(9, "owner-1")
        config_id, values = svc.replace_config_values.await_args.args
        assert config_id == 9
        assert [(v.param_id, v.value) for v in values] == [(1, "a"), (2, 5)]

    def test_missing_config(self, client, svc):
        svc.check_config_ownership.return_value = None

        resp = client.put("/api/v1/sld/configs/9/values", json={"values": []})

        assert resp.status_code == 404
        svc.replace_config_values.assert_not_awaited()

    def test_not_owner(self, client, svc):
        svc.check_config_ownership.return_value = False

        resp = client.put("/api/v1/sld/configs/9/values", json={"uuid": "intruder", "values": []})

        assert resp.status_code == 403
        svc.replace_config_values.assert_not_awaited()

    def test_without_uuid_skips_owner_match(self, client, svc):
        svc.check_config_ownership.return_value = False

        resp = client.put("/api/v1/sld/configs/9/values", json={"values": []})

        assert resp.status_code == 200

    def test_duplicate_param_is_422(self, client, svc):
        svc.replace_config_values.side_effect = DuplicateParamError("twice", config_id=9, param_id=1)
        body = {"values": [{"param_id": 1, "value": "a"}, {"param_id": 1, "value": "b"}]}

        resp = client.put("/api/v1/sld/configs/9/values", json=body)

        assert resp.status_code == 422
        assert resp.json()["detail"]["param_id"] == 1

    def test_get_values(self, client, svc):
        svc.get_config_values.return_value = [ConfigValue(id=1, config_id=9, param_id=2, value="x")]

        resp = client.get("/api/v1/sld/configs/9/values")

        assert resp.json() == [{"id": 1, "config_id": 9, "param_id": 2, "value": "x"}]


class TestConfigOwner:

    def test_owner(self, client, svc):
        svc.get_config.return_value = SldConfig(id=9, template_id=1, name="mine", uuid="owner-1")

        resp = client.get("/api/v1/sld/configs/9/owner")

        assert resp.json() == {"config_id": 9, "uuid": "owner-1"}

    def test_unowned(self, client, svc):
        svc.get_config.return_value = SldConfig(id=9, template_id=1, name="mine", uuid=None)

        resp = client.get("/api/v1/sld/configs/9/owner")

        assert resp.status_code == 200
        assert resp.json()["uuid"] is None

    def test_missing(self, client, svc):
        resp = client.get("/api/v1/sld/configs/9/owner")
        assert resp.status_code == 404


class TestServiceNotInitialized:

    def test_503(self):
        app = _make_test_app(None)
        resp = TestClient(app).get("/api/v1/sld/templates")
        assert resp.status_code == 503
