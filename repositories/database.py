# ============================================================================
# DATABASE CONNECTION POOL
# ============================================================================
# STATUS: Core - Async PostgreSQL connection management
# PURPOSE: Resolve the connection string and own the process-wide pool
# CREATED: 18 OCT 2026
# ============================================================================
"""
Database Connection Pool

One AsyncConnectionPool per process, opened by the application lifespan and
handed to SldService. Scripts that run a single transaction skip the pool and
give UnitOfWork a conninfo instead.

Connection string resolution, first match wins:
    1. USE_MANAGED_IDENTITY=true  -> Entra token as password (postgres_auth)
    2. DATABASE_URL
    3. POSTGRES_HOST / PORT / DB / USER / PASSWORD / SSLMODE
"""

import os
import logging
from typing import Optional

from psycopg import ProgrammingError
from psycopg import sql as psycopg_sql
from psycopg.conninfo import conninfo_to_dict, make_conninfo
from psycopg_pool import AsyncConnectionPool

from core.config import get_defaults
from .postgres_auth import get_postgres_connection_string, use_managed_identity

logger = logging.getLogger(__name__)

_pool: Optional[AsyncConnectionPool] = None


def get_connection_string() -> str:
    if use_managed_identity():
        logger.info("Using Managed Identity for PostgreSQL authentication")
        return get_postgres_connection_string()

    if url := os.environ.get("DATABASE_URL"):
        return url

    return make_conninfo(
        host=os.environ.get("POSTGRES_HOST", "localhost"),
        port=os.environ.get("POSTGRES_PORT", "5432"),
        dbname=os.environ.get("POSTGRES_DB", "postgres"),
        user=os.environ.get("POSTGRES_USER", "postgres"),
        password=os.environ.get("POSTGRES_PASSWORD", ""),
        sslmode=os.environ.get("POSTGRES_SSLMODE", "require"),
    )


def mask_conninfo(conninfo: str) -> str:
    """host/port/dbname of a URL or key/value conninfo, without credentials."""
    try:
        params = conninfo_to_dict(conninfo)
    except ProgrammingError:
        return "<invalid conninfo>"

    shown = {k: params[k] for k in ("host", "port", "dbname") if params.get(k)}
    return make_conninfo(**shown)


async def init_pool(
    min_size: Optional[int] = None,
    max_size: Optional[int] = None,
    connection_string: Optional[str] = None,
) -> AsyncConnectionPool:
    """
    Open the process pool. Sizes and timeout default to DatabaseDefaults.

    Calling it again returns the pool already open.
    """
    global _pool

    if _pool is not None:
        logger.warning("Pool already initialized, returning existing pool")
        return _pool

    settings = get_defaults().database
    conninfo = connection_string or get_connection_string()
    pool = AsyncConnectionPool(
        conninfo=conninfo,
        min_size=settings.pool_min_size if min_size is None else min_size,
        max_size=settings.pool_max_size if max_size is None else max_size,
        timeout=settings.connect_timeout,
        open=False,
    )

    logger.info(f"Opening connection pool to {mask_conninfo(conninfo)}")
    await pool.open()
    _pool = pool
    logger.info(f"Connection pool open (min={pool.min_size}, max={pool.max_size})")
    return _pool


async def close_pool() -> None:
    global _pool

    pool, _pool = _pool, None
    if pool is not None:
        await pool.close()
        logger.info("Connection pool closed")


# ============================================================================
# TABLE IDENTIFIERS
# ============================================================================

SCHEMA = get_defaults().database.schema

TABLE_TEMPLATES = psycopg_sql.Identifier(SCHEMA, "sld_template")
TABLE_FEATURETYPES = psycopg_sql.Identifier(SCHEMA, "sld_featuretype")
TABLE_RULES = psycopg_sql.Identifier(SCHEMA, "sld_rule")
TABLE_PARAM_TYPES = psycopg_sql.Identifier(SCHEMA, "sld_type")
TABLE_PARAMS = psycopg_sql.Identifier(SCHEMA, "sld_param")
TABLE_CONFIGS = psycopg_sql.Identifier(SCHEMA, "sld_config")
TABLE_VALUES = psycopg_sql.Identifier(SCHEMA, "sld_value")
