from typing import Any


class TransactionError(Exception):
    """Base exception for transaction errors"""

    pass


class NotInContext(TransactionError):
    """Raised when an operation needs a bound connection and none is bound"""

    def __init__(
        self,
        message: str = (
            "You are trying to commit/rollback the transaction outside of "
            "a transaction context"
        ),
    ) -> None:
        super().__init__(message)


class RollbackError(TransactionError):
    """Raised when the wrapped work failed and the rollback failed too.

    Both failures are kept: ``error`` is the original failure of the
    wrapped work and ``rollback_error`` is what the runner raised while
    rolling back. The latter is also chained as ``__cause__``.
    """

    def __init__(
        self, error: BaseException, rollback_error: BaseException
    ) -> None:
        self.error = error
        self.rollback_error = rollback_error
        super().__init__(
            f"Rollback failed ({rollback_error!r}) after error: {error!r}"
        )


class RollbackRequested(TransactionError):
    """Raised by a nested run whose work asked for a rollback"""

    def __init__(self, value: Any = None) -> None:
        self.value = value
        super().__init__(
            "Nested transaction requested a rollback of the enclosing "
            "transaction"
        )
