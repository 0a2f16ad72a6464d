# ============================================================================
# REPOSITORIES MODULE
# ============================================================================
# STATUS: Data access layer
# PURPOSE: Connection pool, unit of work and SQL statements for the SLD store
# CREATED: 18 OCT 2026
# ============================================================================

from .database import (
    init_pool,
    close_pool,
    get_connection_string,
)
from .unit_of_work import UnitOfWork, UnitOfWorkState
from .sld_repo import SldRepository
from .schema import deploy_schema

__all__ = [
    # Database
    "init_pool",
    "close_pool",
    "get_connection_string",
    # Transactions
    "UnitOfWork",
    "UnitOfWorkState",
    # Repositories
    "SldRepository",
    # Schema
    "deploy_schema",
]
