"""Transaction lifecycle: capability contracts, phase errors and the core."""

from fstxn.transaction.capabilities import Aborter, Starter, Stopper
from fstxn.transaction.core import (
    OPEN_ATTEMPT_WAIT_SECONDS,
    TRANSITIONS,
    Transaction,
    TransactionState,
)
from fstxn.transaction.exceptions import (
    AbortError,
    CloseError,
    OpenError,
    TransactionError,
    TransactionPhase,
)

__all__ = [
    "Aborter",
    "Starter",
    "Stopper",
    "OPEN_ATTEMPT_WAIT_SECONDS",
    "TRANSITIONS",
    "Transaction",
    "TransactionState",
    "AbortError",
    "CloseError",
    "OpenError",
    "TransactionError",
    "TransactionPhase",
]
