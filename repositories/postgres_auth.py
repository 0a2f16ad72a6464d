# ============================================================================
# POSTGRESQL MANAGED IDENTITY AUTHENTICATION
# ============================================================================
# STATUS: Core - Entra ID token auth for Azure Database for PostgreSQL
# PURPOSE: Build a connection string whose password is a cached OAuth token
# CREATED: 18 OCT 2026
# ============================================================================
"""
PostgreSQL Managed Identity Authentication

Used by get_connection_string() when USE_MANAGED_IDENTITY=true. The token is
cached and refreshed when less than five minutes of validity remain. Each
call to get_connection_string() gets a current token, but the conninfo is a
plain string: a pool opened with it keeps that token for its lifetime, so
the pool must be reopened before the token expires.

Environment Variables:
    USE_MANAGED_IDENTITY=true
    AZURE_CLIENT_ID=<guid>              user-assigned identity (optional)
    POSTGRES_IDENTITY_NAME=<name>       database role mapped to the identity
    POSTGRES_HOST / POSTGRES_PORT / POSTGRES_DB
"""

import os
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from psycopg.conninfo import make_conninfo

logger = logging.getLogger(__name__)

# OAuth scope for Azure Database for PostgreSQL
POSTGRES_SCOPE = "https://ossrdbms-aad.database.windows.net/.default"

TOKEN_REFRESH_BUFFER_SECS = 300


@dataclass
class TokenCache:
    """In-memory token cache."""
    token: Optional[str] = None
    expires_at: Optional[datetime] = None

    def get_if_valid(self, min_ttl_seconds: int = 0) -> Optional[str]:
        if not self.token or not self.expires_at:
            return None
        if self.ttl_seconds() <= min_ttl_seconds:
            return None
        return self.token

    def set(self, token: str, expires_at: datetime) -> None:
        self.token = token
        self.expires_at = expires_at

    def invalidate(self) -> None:
        self.token = None
        self.expires_at = None

    def ttl_seconds(self) -> float:
        if not self.expires_at:
            return 0
        return (self.expires_at - datetime.now(timezone.utc)).total_seconds()


_token_cache = TokenCache()


def use_managed_identity() -> bool:
    return os.environ.get("USE_MANAGED_IDENTITY", "false").lower() == "true"


def _credential():
    from azure.identity import DefaultAzureCredential, ManagedIdentityCredential

    client_id = os.environ.get("AZURE_CLIENT_ID")
    if client_id:
        logger.info(f"Using user-assigned Managed Identity: {client_id[:8]}...")
        return ManagedIdentityCredential(client_id=client_id)
    logger.info("Using DefaultAzureCredential (system MI or az login)")
    return DefaultAzureCredential()


def get_postgres_token() -> str:
    """
    OAuth token for PostgreSQL, from cache when still fresh.

    Raises:
        azure.core.exceptions.ClientAuthenticationError: Token acquisition failed
    """
    cached = _token_cache.get_if_valid(min_ttl_seconds=TOKEN_REFRESH_BUFFER_SECS)
    if cached:
        logger.debug(f"Using cached PostgreSQL token, TTL: {_token_cache.ttl_seconds():.0f}s")
        return cached

    from azure.core.exceptions import ClientAuthenticationError

    try:
        token_response = _credential().get_token(POSTGRES_SCOPE)
    except ClientAuthenticationError as e:
        logger.error(
            f"PostgreSQL token acquisition failed: {e}. "
            f"Check that the database role {os.environ.get('POSTGRES_IDENTITY_NAME', '')!r} "
            f"exists and is mapped to this identity"
        )
        raise

    expires_at = datetime.fromtimestamp(token_response.expires_on, tz=timezone.utc)
    _token_cache.set(token_response.token, expires_at)
    logger.info(f"PostgreSQL token acquired, expires: {expires_at.isoformat()}")
    return token_response.token


def get_postgres_connection_string() -> str:
    """Key/value connection string with the identity as user and token as password."""
    identity_name = os.environ.get("POSTGRES_IDENTITY_NAME")
    if not identity_name:
        raise ValueError("USE_MANAGED_IDENTITY=true requires POSTGRES_IDENTITY_NAME")

    host = os.environ.get("POSTGRES_HOST", "localhost")
    port = os.environ.get("POSTGRES_PORT", "5432")
    database = os.environ.get("POSTGRES_DB", "postgres")

    return make_conninfo(
        host=host,
        port=port,
        dbname=database,
        user=identity_name,
        password=get_postgres_token(),
        sslmode="require",
    )


def get_postgres_token_status() -> Dict[str, Any]:
    """Token status for the readiness probe."""
    if not use_managed_identity():
        return {"auth_type": "password"}

    return {
        "auth_type": "managed_identity",
        "token_cached": _token_cache.token is not None,
        "ttl_seconds": round(_token_cache.ttl_seconds()) if _token_cache.token else 0,
    }


__all__ = [
    "use_managed_identity",
    "get_postgres_token",
    "get_postgres_connection_string",
    "get_postgres_token_status",
]
