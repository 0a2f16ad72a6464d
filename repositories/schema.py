# ============================================================================
# SCHEMA DEPLOYMENT
# ============================================================================
# STATUS: Core - DDL execution against PostgreSQL
# PURPOSE: Create the sld schema, tables, indexes and triggers from the models
# CREATED: 18 OCT 2026
# ============================================================================
"""
Schema Deployment

Runs the PydanticToSQL statements on a dedicated synchronous connection in a
single transaction. Used by scripts/deploy_schema.py and by the application
when AUTO_BOOTSTRAP_SCHEMA=true.
"""

import logging
from typing import Optional

import psycopg

from core.config import get_defaults
from core.errors import DatabaseConnectionError, StatementError
from core.schema import PydanticToSQL
from .database import get_connection_string, mask_conninfo

logger = logging.getLogger(__name__)


def build_generator(schema: Optional[str] = None) -> PydanticToSQL:
    """Generator configured from defaults."""
    db = get_defaults().database
    return PydanticToSQL(
        schema_name=schema or db.schema,
        param_type_upsert=db.param_type_upsert,
    )


def deploy_schema(
    connection_string: Optional[str] = None,
    dry_run: bool = False,
    rebuild: bool = False,
    schema: Optional[str] = None,
) -> int:
    """
    Deploy the SLD schema.

    Args:
        connection_string: Override connection string (defaults to env)
        dry_run: Log statements without connecting
        rebuild: DROP SCHEMA CASCADE first (destroys all data)
        schema: Override schema name

    Returns:
        Number of statements executed (or previewed)

    Raises:
        DatabaseConnectionError: Could not connect
        StatementError: A DDL statement failed; nothing was applied
    """
    generator = build_generator(schema)

    if dry_run:
        return generator.execute(None, dry_run=True, rebuild=rebuild)

    conninfo = connection_string or get_connection_string()
    logger.info(f"Deploying schema {generator.schema_name} to {mask_conninfo(conninfo)}")

    try:
        conn = psycopg.connect(conninfo)
    except psycopg.Error as e:
        raise DatabaseConnectionError(f"Could not connect: {e}", operation="deploy_schema") from e

    try:
        with conn:
            return generator.execute(conn, rebuild=rebuild)
    except psycopg.Error as e:
        logger.error(f"Schema deployment failed: {e}")
        raise StatementError(
            f"Schema deployment failed: {e}",
            operation="deploy_schema",
            entity_id=generator.schema_name,
        ) from e


__all__ = ["build_generator", "deploy_schema"]
