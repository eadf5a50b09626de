from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from inspect import isawaitable
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

T = TypeVar("T")


class ScopedContext(Generic[T]):
    """
    Binds a value to the dynamic extent of a call.

    The binding lives in a ``ContextVar``, so it follows the logical call
    chain across every ``await``, is inherited by tasks spawned inside it
    and by ``asyncio.to_thread`` calls, and is never visible to unrelated
    tasks or threads running at the same time.
    """

    def __init__(self, name: str = "transaction_connection") -> None:
        self._name = name
        self._value: ContextVar[Optional[T]] = ContextVar(name, default=None)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self._name}>"

    def get(self) -> Optional[T]:
        return self._value.get()

    @contextmanager
    def bind(self, value: T) -> Iterator[T]:
        token = self._value.set(value)
        try:
            yield value
        finally:
            self._value.reset(token)

    async def run(
        self, value: T, fn: Callable[..., Any], *args: Any, **kwargs: Any
    ) -> Any:
        """Execute ``fn`` with ``value`` bound for its whole duration

        Whatever ``fn`` raises propagates unchanged. The previous binding
        is restored once it settles.

        Args:
            value (T): The value to bind
            fn (Callable[..., Any]): A callable, sync or async

        Returns:
            Any: The result of ``fn``
        """
        with self.bind(value):
            result = fn(*args, **kwargs)
            if isawaitable(result):
                result = await result
            return result
