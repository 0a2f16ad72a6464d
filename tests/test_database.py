# ============================================================================
# DATABASE CONNECTION TESTS
# ============================================================================
# STATUS: Tests - Connection string resolution and token auth
# PURPOSE: Verify env precedence, credential masking and token caching
# CREATED: 18 OCT 2026
# ============================================================================
"""
Database Connection Tests

Run with:
    pytest tests/test_database.py -v
"""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

from psycopg.conninfo import conninfo_to_dict

from repositories import postgres_auth
from repositories.database import get_connection_string, mask_conninfo


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in (
        "USE_MANAGED_IDENTITY", "DATABASE_URL", "POSTGRES_HOST", "POSTGRES_PORT",
        "POSTGRES_DB", "POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_SSLMODE",
        "POSTGRES_IDENTITY_NAME", "AZURE_CLIENT_ID",
    ):
        monkeypatch.delenv(key, raising=False)
    postgres_auth._token_cache.invalidate()
    yield
    postgres_auth._token_cache.invalidate()


class TestConnectionString:

    def test_database_url_wins(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/sld")
        monkeypatch.setenv("POSTGRES_HOST", "ignored")

        assert get_connection_string() == "postgresql://u:p@db:5432/sld"

    def test_built_from_components(self, monkeypatch):
        monkeypatch.setenv("POSTGRES_HOST", "db")
        monkeypatch.setenv("POSTGRES_DB", "styles")
        monkeypatch.setenv("POSTGRES_USER", "writer")
        monkeypatch.setenv("POSTGRES_PASSWORD", "secret")
        monkeypatch.setenv("POSTGRES_SSLMODE", "disable")

        params = conninfo_to_dict(get_connection_string())

        assert params["host"] == "db"
        assert params["dbname"] == "styles"
        assert params["user"] == "writer"
        assert params["password"] == "secret"
        assert params["sslmode"] == "disable"

    def test_mask_url(self):
        masked = mask_conninfo("postgresql://writer:secret@db:5432/sld")

        assert conninfo_to_dict(masked) == {"host": "db", "port": "5432", "dbname": "sld"}

    def test_mask_key_value(self):
        masked = mask_conninfo("host=db user=writer password=secret")
        assert "secret" not in masked
        assert "writer" not in masked

    def test_mask_invalid(self):
        assert mask_conninfo("not a conninfo") == "<invalid conninfo>"

    def test_managed_identity(self, monkeypatch):
        monkeypatch.setenv("USE_MANAGED_IDENTITY", "true")
        monkeypatch.setenv("POSTGRES_HOST", "srv.postgres.database.azure.com")
        monkeypatch.setenv("POSTGRES_IDENTITY_NAME", "sld-writer")

        with patch.object(postgres_auth, "get_postgres_token", return_value="tok"):
            conninfo = get_connection_string()

        assert "user=sld-writer" in conninfo
        assert "password=tok" in conninfo
        assert "sslmode=require" in conninfo

    def test_managed_identity_requires_role_name(self, monkeypatch):
        monkeypatch.setenv("USE_MANAGED_IDENTITY", "true")

        with pytest.raises(ValueError):
            get_connection_string()


class TestTokenCache:

    def test_token_is_cached(self):
        expires = datetime.now(timezone.utc) + timedelta(hours=1)
        credential = MagicMock()
        credential.get_token.return_value = MagicMock(token="tok-1", expires_on=int(expires.timestamp()))

        with patch.object(postgres_auth, "_credential", return_value=credential):
            assert postgres_auth.get_postgres_token() == "tok-1"
            assert postgres_auth.get_postgres_token() == "tok-1"

        credential.get_token.assert_called_once_with(postgres_auth.POSTGRES_SCOPE)

    def test_token_near_expiry_is_refreshed(self):
        postgres_auth._token_cache.set("old", datetime.now(timezone.utc) + timedelta(seconds=60))
        expires = datetime.now(timezone.utc) + timedelta(hours=1)
        credential = MagicMock()
        credential.get_token.return_value = MagicMock(token="new", expires_on=int(expires.timestamp()))

        with patch.object(postgres_auth, "_credential", return_value=credential):
            assert postgres_auth.get_postgres_token() == "new"

    def test_status_for_password_auth(self):
        assert postgres_auth.get_postgres_token_status() == {"auth_type": "password"}

    def test_conninfo_carries_token_current_at_call_time(self, monkeypatch):
        monkeypatch.setenv("USE_MANAGED_IDENTITY", "true")
        monkeypatch.setenv("POSTGRES_IDENTITY_NAME", "sld-writer")

        with patch.object(postgres_auth, "get_postgres_token", side_effect=["tok-1", "tok-2"]):
            first = conninfo_to_dict(get_connection_string())
            second = conninfo_to_dict(get_connection_string())

        assert first["password"] == "tok-1"
        assert second["password"] == "tok-2"
