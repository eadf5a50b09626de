from __future__ import annotations

from enum import Enum
from typing import Union

from txscope.exception import TransactionError


class IsolationLevel(Enum):
    """SQL transaction isolation levels"""

    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"

    @classmethod
    def parse(cls, value: Union[IsolationLevel, str]) -> IsolationLevel:
        """Coerce a member, its SQL string or its name into a level

        Example:

        ```python
        IsolationLevel.parse("serializable")      # SERIALIZABLE
        IsolationLevel.parse("REPEATABLE_READ")   # REPEATABLE_READ
        ```

        Args:
            value (Union[IsolationLevel, str]): The level to coerce

        Raises:
            TransactionError: When the value names no known level

        Returns:
            IsolationLevel: The matching member
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().upper()
            for level in cls:
                if normalized in (level.value, level.name):
                    return level
        raise TransactionError(f"Unknown isolation level: {value!r}")


DEFAULT_ISOLATION_LEVEL = IsolationLevel.READ_COMMITTED
