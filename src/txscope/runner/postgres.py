from __future__ import annotations

import logging
from typing import Optional

from txscope.exception import TransactionError
from txscope.isolation import DEFAULT_ISOLATION_LEVEL, IsolationLevel
from txscope.runner.base import PoolRunner

try:
    from psycopg import AsyncConnection
    from psycopg import IsolationLevel as PostgresIsolationLevel
    from psycopg_pool import AsyncConnectionPool

    POSTGRES_ENABLED = True
except ModuleNotFoundError:
    POSTGRES_ENABLED = False
    AsyncConnection = type("Connection", (), {})  # type: ignore
    AsyncConnectionPool = type("Connection", (), {})  # type: ignore

logger = logging.getLogger(__name__)


class PostgresRunner(PoolRunner[AsyncConnection]):
    """Runs transactions on a Postgres database through a psycopg pool"""

    scheme = "postgres"

    def __init__(self, *args, timeout: Optional[float] = None, **kwargs):
        self._timeout = timeout
        super().__init__(*args, **kwargs)

    def _setup_pool(self):
        if not POSTGRES_ENABLED:
            raise TransactionError(
                "Postgres driver not found. Try reinstalling txscope: "
                "pip install txscope[postgres]"
            )
        self._pool = AsyncConnectionPool(
            self.full_dsn,
            min_size=self.min_size,
            max_size=self.max_size,
            open=False,
        )

    async def open(self):
        """Open connections to the pool"""
        await self._pool.open()

    async def close(self):
        """Close connections to the pool"""
        await self._pool.close()

    async def begin(
        self, isolation_level: str = DEFAULT_ISOLATION_LEVEL.value
    ) -> AsyncConnection:
        """Take a connection out of the pool for a new transaction

        psycopg opens the transaction with ``BEGIN ISOLATION LEVEL ...``
        on the first statement executed on the connection.

        Args:
            isolation_level (str, optional): SQL isolation level. Defaults
                to `READ COMMITTED`.

        Returns:
            AsyncConnection: The connection owning the transaction
        """
        level = IsolationLevel.parse(isolation_level)
        conn = await self._pool.getconn(timeout=self._timeout)
        try:
            await conn.set_autocommit(False)
            await conn.set_isolation_level(PostgresIsolationLevel[level.name])
        except Exception:
            await self._pool.putconn(conn)
            raise
        logger.debug("Acquired connection from %s (%s)", self, level.value)
        return conn

    async def commit(self, connection: AsyncConnection) -> None:
        try:
            await connection.commit()
        finally:
            await self._release(connection)

    async def rollback(self, connection: AsyncConnection) -> None:
        try:
            await connection.rollback()
        finally:
            await self._release(connection)

    async def _release(self, connection: AsyncConnection) -> None:
        try:
            await self._pool.putconn(connection)
            logger.debug("Released connection to %s", self)
        except Exception as e:
            logger.warning("Error releasing connection to %s: %s", self, e)
