from __future__ import annotations

import logging
from inspect import isawaitable

from txscope.exception import TransactionError
from txscope.isolation import DEFAULT_ISOLATION_LEVEL, IsolationLevel
from txscope.runner.base import PoolRunner

try:
    from asyncmy import Connection, create_pool

    MYSQL_ENABLED = True
except ModuleNotFoundError:
    MYSQL_ENABLED = False
    Connection = type("Connection", (), {})  # type: ignore

logger = logging.getLogger(__name__)


class MysqlRunner(PoolRunner[Connection]):
    """Runs transactions on a MySQL database through an asyncmy pool"""

    scheme = "mysql"

    def _setup_pool(self):
        if not MYSQL_ENABLED:
            raise TransactionError(
                "MySQL driver not found. Try reinstalling txscope: "
                "pip install txscope[mysql]"
            )
        self._pool = create_pool(
            user=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            db=self.db,
            minsize=self.min_size,
            maxsize=self.max_size or 10,
        )

    async def open(self):
        """Open connections to the pool"""
        self._pool = await self._pool

    async def close(self):
        """Close connections to the pool"""
        self._pool.close()
        await self._pool.wait_closed()

    async def begin(
        self, isolation_level: str = DEFAULT_ISOLATION_LEVEL.value
    ) -> Connection:
        level = IsolationLevel.parse(isolation_level)
        conn = await self._pool.acquire()
        try:
            # Applies to the next transaction started on this session only
            async with conn.cursor() as cursor:
                await cursor.execute(
                    f"SET TRANSACTION ISOLATION LEVEL {level.value}"
                )
            await conn.begin()
        except Exception:
            await self._release(conn)
            raise
        logger.debug("Acquired connection from %s (%s)", self, level.value)
        return conn

    async def commit(self, connection: Connection) -> None:
        try:
            await connection.commit()
        finally:
            await self._release(connection)

    async def rollback(self, connection: Connection) -> None:
        try:
            await connection.rollback()
        finally:
            await self._release(connection)

    async def _release(self, connection: Connection) -> None:
        try:
            released = self._pool.release(connection)
            if isawaitable(released):
                await released
            logger.debug("Released connection to %s", self)
        except Exception as e:
            logger.warning("Error releasing connection to %s: %s", self, e)
