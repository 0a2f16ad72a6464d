# ============================================================================
# UNIT OF WORK
# ============================================================================
# STATUS: Core - Transaction scope over one PostgreSQL connection
# PURPOSE: Run a group of statements atomically: all committed or none
# CREATED: 18 OCT 2026
# EXPORTS: UnitOfWork, UnitOfWorkState
# DEPENDENCIES: psycopg, psycopg_pool
# ============================================================================
"""
Unit of Work

One UnitOfWork owns one connection and one transaction. Every statement of a
logical operation runs through it; the operation ends with exactly one
commit or rollback.

Lifecycle:
    NEW --begin--> ACTIVE --commit/rollback--> CLOSED

Connection sources (exactly one):
    pool        checked out with getconn() and returned on close
    conninfo    a dedicated connection opened and closed by the unit
    connection  an idle caller-owned connection, never closed here

Usage:
    async with UnitOfWork(pool) as uow:
        row = await uow.query_one(sql.SQL("INSERT ... RETURNING id"), params)
        # commits on normal exit, rolls back if the block raises

Errors:
    DatabaseConnectionError  connect or BEGIN failed
    StatementError           a statement, COMMIT or ROLLBACK failed
    NotFoundError            query_one returned no rows
    ClosedError              any use after commit/rollback
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

import psycopg
from psycopg import AsyncConnection, sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from core.config import get_defaults
from core.errors import (
    ClosedError,
    DatabaseConnectionError,
    NotFoundError,
    StatementError,
)
from core.logging import get_logger, ComponentType
from repositories.database import get_connection_string

logger = get_logger(__name__, ComponentType.REPOSITORY)

Query = Union[str, sql.Composable]
Params = Optional[Union[Sequence[Any], Dict[str, Any]]]


class UnitOfWorkState(str, Enum):
    NEW = "new"
    ACTIVE = "active"
    CLOSED = "closed"


class UnitOfWork:
    """
    Transaction scope for one logical operation.

    Subclasses may override _open, _finish and _release to run against
    something other than a live connection.
    """

    def __init__(
        self,
        pool: Optional[AsyncConnectionPool] = None,
        conninfo: Optional[str] = None,
        connection: Optional[AsyncConnection] = None,
        connect_timeout: Optional[float] = None,
    ):
        sources = [s for s in (pool, conninfo, connection) if s is not None]
        if len(sources) > 1:
            raise ValueError("UnitOfWork takes one of pool, conninfo or connection")

        self.pool = pool
        self.conninfo = conninfo
        self.timeout = connect_timeout if connect_timeout is not None else get_defaults().database.connect_timeout
        self.state = UnitOfWorkState.NEW

        self._conn: Optional[AsyncConnection] = connection
        self._owns_connection = connection is None
        self._saved_autocommit: Optional[bool] = None
        self._saved_row_factory = None

    @property
    def active(self) -> bool:
        return self.state == UnitOfWorkState.ACTIVE

    @property
    def connection(self) -> Optional[AsyncConnection]:
        return self._conn

    # =========================================================================
    # CONNECTION HOOKS
    # =========================================================================

    async def _open(self) -> None:
        """Acquire the connection and start the transaction."""
        if self.pool is not None:
            self._conn = await self.pool.getconn(timeout=self.timeout)
        elif self._conn is None:
            self._conn = await AsyncConnection.connect(
                self.conninfo or get_connection_string(),
                connect_timeout=int(self.timeout),
            )

        self._saved_autocommit = self._conn.autocommit
        self._saved_row_factory = self._conn.row_factory
        await self._conn.set_autocommit(True)
        self._conn.row_factory = dict_row
        await self._conn.execute("BEGIN")

    async def _finish(self, command: str) -> None:
        """Send COMMIT or ROLLBACK."""
        await self._conn.execute(command)

    async def _release(self) -> None:
        """Give the connection back to wherever it came from."""
        conn = self._conn
        if conn is None:
            return

        if self.pool is None and self._owns_connection:
            await conn.close()
            self._conn = None
            return

        if not conn.closed:
            try:
                conn.row_factory = self._saved_row_factory or conn.row_factory
                if self._saved_autocommit is not None:
                    await conn.set_autocommit(self._saved_autocommit)
            except psycopg.Error as e:
                logger.warning(f"Could not restore connection settings: {e}")

        if self.pool is not None:
            await self.pool.putconn(conn)
            self._conn = None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def begin(self) -> "UnitOfWork":
        """
        Acquire a connection and BEGIN.

        Raises:
            DatabaseConnectionError: Connection could not be acquired or
                BEGIN failed. Any acquired connection is released.
            ClosedError: The unit has already been started or closed.
        """
        if self.state != UnitOfWorkState.NEW:
            raise ClosedError(f"Unit of work already {self.state.value}", operation="begin")

        try:
            await self._open()
        except psycopg.Error as e:
            self.state = UnitOfWorkState.CLOSED
            logger.error(f"Could not start transaction: {e}")
            try:
                await self._release()
            except psycopg.Error as release_error:
                logger.warning(f"Connection release after failed begin also failed: {release_error}")
            raise DatabaseConnectionError(
                f"Could not start transaction: {e}", operation="begin"
            ) from e

        self.state = UnitOfWorkState.ACTIVE
        logger.debug("Transaction started")
        return self

    async def commit(self) -> None:
        """
        COMMIT and release the connection.

        Raises:
            StatementError: COMMIT failed; nothing was persisted.
            ClosedError: Unit is not active.
        """
        await self._close("COMMIT")

    async def rollback(self) -> None:
        """
        ROLLBACK and release the connection.

        Raises:
            StatementError: ROLLBACK failed.
            ClosedError: Unit is not active.
        """
        await self._close("ROLLBACK")

    async def _close(self, command: str) -> None:
        self._require_active(command.lower())
        self.state = UnitOfWorkState.CLOSED
        try:
            await self._finish(command)
        except psycopg.Error as e:
            logger.error(f"{command} failed: {e}")
            raise StatementError(f"{command} failed: {e}", operation=command.lower()) from e
        finally:
            await self._release()
        logger.debug(f"Transaction closed with {command}")

    async def __aenter__(self) -> "UnitOfWork":
        return await self.begin()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        if not self.active:
            return False

        if exc_type is None:
            await self.commit()
            return False

        try:
            await self.rollback()
        except Exception as rollback_error:
            logger.error(f"Rollback after {exc_type.__name__} failed: {rollback_error}")
        return False

    # =========================================================================
    # STATEMENTS
    # =========================================================================

    def _require_active(self, operation: str) -> None:
        if self.state != UnitOfWorkState.ACTIVE:
            raise ClosedError(
                f"Cannot {operation}: unit of work is {self.state.value}",
                operation=operation,
            )

    async def _run(self, operation: str, query: Query, params: Params):
        self._require_active(operation)
        try:
            return await self._conn.execute(query, params)
        except psycopg.Error as e:
            logger.warning(f"Statement failed during {operation}: {e}")
            raise StatementError(str(e), operation=operation) from e

    async def execute(self, query: Query, params: Params = None) -> int:
        """Run a statement, return the affected row count."""
        cur = await self._run("execute", query, params)
        return cur.rowcount

    async def query_many(self, query: Query, params: Params = None) -> List[Dict[str, Any]]:
        """Run a statement, return all rows as dicts."""
        cur = await self._run("query", query, params)
        try:
            return await cur.fetchall()
        except psycopg.Error as e:
            raise StatementError(str(e), operation="query") from e

    async def query_optional(self, query: Query, params: Params = None) -> Optional[Dict[str, Any]]:
        """Run a statement, return the first row or None."""
        cur = await self._run("query", query, params)
        try:
            return await cur.fetchone()
        except psycopg.Error as e:
            raise StatementError(str(e), operation="query") from e

    async def query_one(self, query: Query, params: Params = None) -> Dict[str, Any]:
        """
        Run a statement that must produce a row.

        Raises:
            NotFoundError: Statement returned no rows
        """
        row = await self.query_optional(query, params)
        if row is None:
            raise NotFoundError("Query returned no rows", operation="query_one")
        return row


__all__ = ["UnitOfWork", "UnitOfWorkState"]
