"""
Transactions with an explicit lifecycle.

The caller starts the transaction, binds it with ``run()`` and decides when
to commit or roll back. Nothing is committed or rolled back automatically:
a callback that settles without calling either leaves the transaction open
on the server until it times out there.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Union

from txscope.isolation import DEFAULT_ISOLATION_LEVEL, IsolationLevel

from .base import BaseTransaction, C

logger = logging.getLogger(__name__)


class IsolatedTransaction(BaseTransaction[C]):
    async def start(
        self,
        isolation_level: Union[IsolationLevel, str] = DEFAULT_ISOLATION_LEVEL,
    ) -> C:
        """Get the bound connection, or begin a new transaction

        The new connection is not bound: pass it to ``run()``.

        Args:
            isolation_level (Union[IsolationLevel, str], optional): Level
                for a newly begun transaction. Defaults to `READ COMMITTED`.

        Returns:
            C: The connection
        """
        existing = self.connection
        if existing is not None:
            return existing
        level = IsolationLevel.parse(isolation_level)
        logger.debug("Beginning transaction (%s)", level.value)
        return await self.runner.begin(level.value)

    async def commit(self) -> None:
        connection = self.require_connection()
        await self.runner.commit(connection)
        logger.debug("Transaction committed")

    async def rollback(self) -> None:
        connection = self.require_connection()
        await self.runner.rollback(connection)
        logger.debug("Transaction rolled back")

    async def run(
        self, connection: C, callback: Callable[[], Union[Awaitable[Any], Any]]
    ) -> Any:
        return await self.context.run(connection, callback)
