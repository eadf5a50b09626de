"""
Transactions with an implicit lifecycle.

The outermost ``run()`` on a call chain begins the transaction, binds the
connection for everything reached from the callback and commits or rolls
back once the callback settles. Nested ``run()`` calls reuse the bound
connection and leave the lifecycle to the outermost one.
"""

from __future__ import annotations

import logging
from functools import partial, wraps
from inspect import isawaitable
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    Optional,
    TypeVar,
    Union,
)
from uuid import uuid4

from txscope.context import ScopedContext
from txscope.exception import RollbackError, RollbackRequested
from txscope.isolation import DEFAULT_ISOLATION_LEVEL, IsolationLevel
from txscope.runner.base import Runner

from .base import BaseTransaction, C

R = TypeVar("R")

logger = logging.getLogger(__name__)


class Rollback(Generic[R]):
    """Result marker asking the transaction to roll back instead of commit.

    Example:

    ```python
    async def transfer():
        if not await has_funds():
            return Rollback("insufficient funds")
        await move_funds()
        return "ok"

    result = await transaction.run(transfer)
    ```

    The outermost ``run()`` rolls back and returns ``value``. A nested
    ``run()`` raises ``RollbackRequested`` so the enclosing transaction is
    rolled back as well.
    """

    __slots__ = ("value",)

    def __init__(self, value: Optional[R] = None) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"<Rollback {self.value!r}>"


class PropagatedTransaction(BaseTransaction[C]):
    def __init__(
        self,
        runner: Runner[C],
        context: Optional[ScopedContext[C]] = None,
        isolation_level: Union[
            IsolationLevel, str
        ] = DEFAULT_ISOLATION_LEVEL,
    ) -> None:
        super().__init__(runner, context)
        self.isolation_level = IsolationLevel.parse(isolation_level)

    async def run(
        self,
        callback: Callable[[], Union[Awaitable[Any], Any]],
        isolation_level: Optional[Union[IsolationLevel, str]] = None,
    ) -> Any:
        """Run ``callback`` inside a transaction

        Example:

        ```python
        transaction = PropagatedTransaction(PostgresRunner(dsn=...))

        async def create_user():
            await transaction.connection.execute("INSERT ...")

        await transaction.run(create_user, IsolationLevel.SERIALIZABLE)
        ```

        Args:
            callback (Callable): Zero argument callable, sync or async
            isolation_level (Union[IsolationLevel, str], optional): Level
                for a newly begun transaction. Ignored when a transaction
                is already bound. Defaults to the controller's level.

        Raises:
            RollbackError: When the callback failed and so did the rollback

        Returns:
            Any: Whatever the callback returned
        """
        existing = self.context.get()
        if existing is not None:
            logger.debug("Reusing bound transaction for nested run")
            result = await self._call(callback)
            if isinstance(result, Rollback):
                raise RollbackRequested(result.value)
            return result

        level = (
            self.isolation_level
            if isolation_level is None
            else IsolationLevel.parse(isolation_level)
        )
        transaction_id = f"txn_{uuid4().hex[:8]}"
        logger.debug(
            "Beginning transaction %s (%s)", transaction_id, level.value
        )
        connection = await self.runner.begin(level.value)

        return await self.context.run(
            connection, self._settle, transaction_id, connection, callback
        )

    async def _settle(
        self,
        transaction_id: str,
        connection: C,
        callback: Callable[[], Union[Awaitable[Any], Any]],
    ) -> Any:
        try:
            result = await self._call(callback)
        except Exception as e:
            logger.error(
                "Transaction %s failed, rolling back: %r", transaction_id, e
            )
            try:
                await self.runner.rollback(connection)
            except Exception as rollback_error:
                logger.critical(
                    "Rollback of %s failed: %r", transaction_id, rollback_error
                )
                raise RollbackError(e, rollback_error) from rollback_error
            logger.info("Transaction %s rolled back", transaction_id)
            raise
        except BaseException as e:
            # Cancellation and interpreter exits are re-raised as they are
            logger.error(
                "Transaction %s interrupted, rolling back: %r",
                transaction_id,
                e,
            )
            try:
                await self.runner.rollback(connection)
            except Exception as rollback_error:
                logger.critical(
                    "Rollback of %s failed: %r", transaction_id, rollback_error
                )
            raise

        if isinstance(result, Rollback):
            await self.runner.rollback(connection)
            logger.info(
                "Transaction %s rolled back on request", transaction_id
            )
            return result.value

        await self.runner.commit(connection)
        logger.info("Transaction %s committed", transaction_id)
        return result

    @staticmethod
    async def _call(callback: Callable[[], Any]) -> Any:
        result = callback()
        if isawaitable(result):
            result = await result
        return result

    def transactional(
        self,
        func: Optional[Callable[..., Awaitable[Any]]] = None,
        *,
        isolation_level: Optional[Union[IsolationLevel, str]] = None,
    ):
        """Decorator that runs a coroutine function in a transaction

        Example:

        ```python
        transaction = PropagatedTransaction(runner)

        @transaction.transactional
        async def create_user(name: str):
            ...

        @transaction.transactional(isolation_level="SERIALIZABLE")
        async def transfer(source: int, target: int, amount: int):
            ...
        ```

        Args:
            isolation_level (Union[IsolationLevel, str], optional): Level
                for a newly begun transaction. Defaults to the
                controller's level.
        """

        def decorator(f):
            @wraps(f)
            async def decorated(*args, **kwargs):
                return await self.run(
                    partial(f, *args, **kwargs), isolation_level
                )

            return decorated

        if func is not None:
            return decorator(func)
        return decorator
