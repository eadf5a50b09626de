from .base import BaseTransaction
from .isolated import IsolatedTransaction
from .propagated import PropagatedTransaction, Rollback

__all__ = [
    "BaseTransaction",
    "IsolatedTransaction",
    "PropagatedTransaction",
    "Rollback",
]
