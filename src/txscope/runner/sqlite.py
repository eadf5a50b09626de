from __future__ import annotations

import logging
from typing import Dict

from txscope.exception import TransactionError
from txscope.isolation import DEFAULT_ISOLATION_LEVEL, IsolationLevel
from txscope.runner.base import Runner

try:
    import aiosqlite

    AIOSQLITE_ENABLED = True
except ModuleNotFoundError:
    AIOSQLITE_ENABLED = False

logger = logging.getLogger(__name__)

# SQLite transactions are always serializable; the level only decides
# when the write lock is taken. Connections are never in shared-cache
# mode, so READ UNCOMMITTED reads nothing more than the other levels.
BEGIN_STATEMENTS: Dict[IsolationLevel, str] = {
    IsolationLevel.READ_UNCOMMITTED: "BEGIN DEFERRED",
    IsolationLevel.READ_COMMITTED: "BEGIN DEFERRED",
    IsolationLevel.REPEATABLE_READ: "BEGIN DEFERRED",
    IsolationLevel.SERIALIZABLE: "BEGIN IMMEDIATE",
}


class SQLiteRunner(Runner["aiosqlite.Connection"]):
    """Runs transactions on a SQLite database file.

    Every transaction gets its own connection, opened on ``begin`` and
    closed once it is committed or rolled back. An in-memory database is
    therefore private to a single transaction.
    """

    def __init__(self, db_path: str, timeout: float = 5.0):
        if not AIOSQLITE_ENABLED:
            raise TransactionError(
                "SQLite driver not found. Try reinstalling txscope: "
                "pip install txscope[sqlite]"
            )
        self._db_path = db_path
        self._timeout = timeout

    def __str__(self) -> str:
        return f"<{self.__class__.__name__} {self._db_path}>"

    async def begin(
        self, isolation_level: str = DEFAULT_ISOLATION_LEVEL.value
    ) -> aiosqlite.Connection:
        level = IsolationLevel.parse(isolation_level)
        # isolation_level=None: no implicit BEGIN, the runner issues its own
        conn = await aiosqlite.connect(
            self._db_path, timeout=self._timeout, isolation_level=None
        )
        conn.row_factory = aiosqlite.Row
        try:
            await conn.execute(BEGIN_STATEMENTS[level])
        except Exception:
            await conn.close()
            raise
        logger.debug("Opened connection to %s (%s)", self, level.value)
        return conn

    async def commit(self, connection: aiosqlite.Connection) -> None:
        try:
            await connection.commit()
        finally:
            await self._release(connection)

    async def rollback(self, connection: aiosqlite.Connection) -> None:
        try:
            await connection.rollback()
        finally:
            await self._release(connection)

    async def _release(self, connection: aiosqlite.Connection) -> None:
        try:
            await connection.close()
            logger.debug("Closed connection to %s", self)
        except Exception as e:
            logger.warning("Error closing connection to %s: %s", self, e)
