from importlib.metadata import version

from .context import ScopedContext
from .exception import (
    NotInContext,
    RollbackError,
    RollbackRequested,
    TransactionError,
)
from .isolation import IsolationLevel
from .runner import (
    MysqlRunner,
    PoolRunner,
    PostgresRunner,
    Runner,
    SQLiteRunner,
)
from .transaction import IsolatedTransaction, PropagatedTransaction, Rollback

__version__ = version("txscope")

__all__ = (
    "IsolatedTransaction",
    "IsolationLevel",
    "MysqlRunner",
    "NotInContext",
    "PoolRunner",
    "PostgresRunner",
    "PropagatedTransaction",
    "Rollback",
    "RollbackError",
    "RollbackRequested",
    "Runner",
    "SQLiteRunner",
    "ScopedContext",
    "TransactionError",
)
