from __future__ import annotations

from typing import Generic, Optional, TypeVar

from txscope.context import ScopedContext
from txscope.exception import NotInContext
from txscope.runner.base import Runner

C = TypeVar("C")


class BaseTransaction(Generic[C]):
    def __init__(
        self,
        runner: Runner[C],
        context: Optional[ScopedContext[C]] = None,
    ) -> None:
        """
        Args:
            runner (Runner): Object that begins, commits and rolls back
                transactions
            context (ScopedContext, optional): Where the current connection
                is bound. Controllers sharing a context share bindings.
                Defaults to a new private context.
        """
        self.runner = runner
        self.context: ScopedContext[C] = context or ScopedContext()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} runner={self.runner!r}>"

    @property
    def connection(self) -> Optional[C]:
        """The connection bound to the current call chain, if any"""
        return self.context.get()

    @property
    def in_transaction(self) -> bool:
        return self.connection is not None

    def require_connection(self) -> C:
        connection = self.connection
        if connection is None:
            raise NotInContext(
                "No transaction is bound to the current context"
            )
        return connection
