"""Phase errors raised by the transaction core."""

from __future__ import annotations

from enum import Enum
from typing import Any


class TransactionPhase(str, Enum):
    """Lifecycle phase that produced an error."""

    OPEN = "open"
    CLOSE = "close"
    ABORT = "abort"


class TransactionError(Exception):
    """Base exception tagging a backend error with its lifecycle phase.

    The backend error is kept in ``error`` and is also the ``__cause__``
    when raised by the core.
    """

    phase: TransactionPhase

    def __init__(
        self,
        error: BaseException,
        attempts: int = 1,
        backend_name: str = "",
    ) -> None:
        self.error = error
        self.attempts = attempts
        self.backend_name = backend_name
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"Transaction {self.phase.value.title()} Error: {self.error}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(error={self.error!r}, "
            f"attempts={self.attempts}, backend_name={self.backend_name!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert error to serializable dictionary."""
        return {
            "phase": self.phase.value,
            "error": str(self.error),
            "error_type": type(self.error).__name__,
            "attempts": self.attempts,
            "backend_name": self.backend_name,
        }


class OpenError(TransactionError):
    """Raised when every attempt to open the transaction failed."""

    phase = TransactionPhase.OPEN


class CloseError(TransactionError):
    """Raised when every attempt to publish and close the transaction failed."""

    phase = TransactionPhase.CLOSE


class AbortError(TransactionError):
    """Raised when killing the transaction failed."""

    phase = TransactionPhase.ABORT
