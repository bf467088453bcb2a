"""fstxn - retryable open/publish/abort transactions for release filesystems."""

from fstxn.context import (
    Cancelled,
    Context,
    ContextError,
    DeadlineExceeded,
    background,
    is_context_error,
    with_cancel,
    with_deadline,
    with_timeout,
)
from fstxn.transaction import (
    Aborter,
    AbortError,
    CloseError,
    OpenError,
    Starter,
    Stopper,
    Transaction,
    TransactionError,
    TransactionPhase,
    TransactionState,
)

__version__ = "0.1.0"

__all__ = [
    "Cancelled",
    "Context",
    "ContextError",
    "DeadlineExceeded",
    "background",
    "is_context_error",
    "with_cancel",
    "with_deadline",
    "with_timeout",
    "Aborter",
    "AbortError",
    "CloseError",
    "OpenError",
    "Starter",
    "Stopper",
    "Transaction",
    "TransactionError",
    "TransactionPhase",
    "TransactionState",
]
