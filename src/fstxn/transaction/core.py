"""Backend-agnostic transaction lifecycle.

A :class:`Transaction` drives a backend's :class:`Starter`, :class:`Stopper`
and :class:`Aborter` through open, close and abort. Open and close retry
failed attempts with an interruptible delay; context errors end the retry
loop at once.

The machine has two states::

    IDLE --mark_opened--> ONGOING --mark_closed--> IDLE
      \\________mark_ongoing________/

A Transaction is not thread-safe. Confine each instance to one workflow.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any

from transitions import Machine

from fstxn.context import Context, is_context_error
from fstxn.transaction.capabilities import Aborter, Starter, Stopper
from fstxn.transaction.exceptions import (
    AbortError,
    CloseError,
    OpenError,
    TransactionError,
)
from fstxn.utils.logging import get_logger

# Delay between open attempts. Publish delays come from the Stopper.
OPEN_ATTEMPT_WAIT_SECONDS = 10


class TransactionState(str, Enum):
    """Transaction lifecycle states."""

    IDLE = "IDLE"
    ONGOING = "ONGOING"


TRANSITIONS: list[dict[str, Any]] = [
    {
        "trigger": "mark_opened",
        "source": TransactionState.IDLE.value,
        "dest": TransactionState.ONGOING.value,
    },
    {
        "trigger": "mark_closed",
        "source": TransactionState.ONGOING.value,
        "dest": TransactionState.IDLE.value,
    },
    {
        "trigger": "mark_ongoing",
        "source": "*",
        "dest": TransactionState.ONGOING.value,
    },
]


def _backend_name(obj: object) -> str:
    return getattr(obj, "name", None) or type(obj).__name__


def _check_attempts(attempts: int, kind: str) -> None:
    if attempts < 1:
        raise ValueError(f"{kind} attempts must be at least 1, got {attempts}")


class Transaction:
    """One open/publish-or-abort cycle against a backend.

    Parameters
    ----------
    starter : Starter
        Performs open attempts and reports how many are allowed.
    stopper : Stopper
        Performs publish attempts and reports their count and spacing.
    aborter : Aborter
        Forcefully ends the transaction.
    """

    def __init__(self, starter: Starter, stopper: Stopper, aborter: Aborter):
        self._starter = starter
        self._stopper = stopper
        self._aborter = aborter
        self.logger = get_logger("transaction").bind(backend=_backend_name(starter))
        self.history: list[str] = []
        self.state: str = TransactionState.IDLE.value

        self._machine = Machine(
            model=self,
            states=[state.value for state in TransactionState],
            transitions=TRANSITIONS,
            initial=TransactionState.IDLE.value,
            auto_transitions=False,
            after_state_change=self._record_transition,
            send_event=False,
        )

    @classmethod
    def for_backend(cls, backend: Any) -> Transaction:
        """Create a transaction using one object for all three capabilities."""
        return cls(starter=backend, stopper=backend, aborter=backend)

    @property
    def starter(self) -> Starter:
        return self._starter

    @property
    def stopper(self) -> Stopper:
        return self._stopper

    @property
    def aborter(self) -> Aborter:
        return self._aborter

    @property
    def ongoing(self) -> bool:
        """True between a successful open and the following close."""
        return self.state == TransactionState.ONGOING.value

    def _record_transition(self) -> None:
        self.history.append(self.state)
        self.logger.debug("transaction.state", state=self.state)

    # ==================== LIFECYCLE ====================

    def open(self, ctx: Context) -> None:
        """Open the transaction, retrying failed attempts.

        Does nothing if the transaction is already ongoing.

        Args:
            ctx: Cancellation context for the attempts and the waits between them.

        Raises:
            OpenError: If every attempt failed. Wraps the last backend error.
            ContextError: If the context finished during a wait, or the
                backend reported a cancellation or deadline error.
            ValueError: If the starter reports fewer than one attempt.
        """
        if self.ongoing:
            return

        attempts = self._starter.open_attempts()
        _check_attempts(attempts, "open")
        self._retry(
            ctx,
            self._starter.start,
            backend=self._starter,
            attempts=attempts,
            wait_seconds=OPEN_ATTEMPT_WAIT_SECONDS,
            error_cls=OpenError,
        )
        self.mark_opened()
        self.logger.info("transaction.opened")

    def close(self, ctx: Context) -> None:
        """Publish and close the transaction, retrying failed attempts.

        Does nothing if the transaction is not ongoing. Once the attempts
        are over the transaction is no longer ongoing, whether or not
        publishing succeeded.

        Raises:
            CloseError: If every attempt failed. Wraps the last backend error.
            ContextError: If the context finished during a wait, or the
                backend reported a cancellation or deadline error.
            ValueError: If the stopper reports fewer than one attempt.
        """
        if not self.ongoing:
            return

        attempts = self._stopper.publish_attempts()
        wait_seconds = self._stopper.publish_attempts_wait()
        _check_attempts(attempts, "publish")
        try:
            self._retry(
                ctx,
                self._stopper.stop,
                backend=self._stopper,
                attempts=attempts,
                wait_seconds=wait_seconds,
                error_cls=CloseError,
            )
        finally:
            self.mark_closed()
        self.logger.info("transaction.closed")

    def abort(self, ctx: Context) -> None:
        """Kill the ongoing transaction without publishing.

        A single attempt is made. The ongoing flag is left untouched; the
        transaction should be discarded afterwards.

        Raises:
            AbortError: If the aborter failed.
            ContextError: If the aborter reported a cancellation or deadline error.
        """
        if not self.ongoing:
            return

        try:
            self._aborter.kill(ctx)
        except Exception as exc:
            if is_context_error(exc):
                raise
            self.logger.error("transaction.abort_failed", error=str(exc))
            raise AbortError(exc, backend_name=_backend_name(self._aborter)) from exc
        self.logger.info("transaction.aborted")

    def set_ongoing(self) -> None:
        """Mark the transaction as ongoing without contacting the backend.

        Used by a process attaching to a transaction opened by an earlier
        process, so that a later close publishes it. Two processes must not
        attach to the same transaction at once.
        """
        self.mark_ongoing()

    @contextmanager
    def opened(self, ctx: Context) -> Iterator[Transaction]:
        """Open on entry and close on exit, even if the body raises.

        An error from the body is logged before closing. If close fails as
        well, the close error propagates and carries the body error only as
        ``__context__``.

        Usage:
            with txn.opened(ctx):
                install_release(...)
        """
        self.open(ctx)
        try:
            yield self
        except Exception as exc:
            self.logger.error(
                "transaction.body_failed",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise
        finally:
            self.close(ctx)

    # ==================== RETRY LOOP ====================

    def _retry(
        self,
        ctx: Context,
        action: Callable[[Context], None],
        *,
        backend: object,
        attempts: int,
        wait_seconds: float,
        error_cls: type[TransactionError],
    ) -> None:
        phase = error_cls.phase.value
        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                action(ctx)
                return
            except Exception as exc:
                if is_context_error(exc):
                    self.logger.warning(
                        f"transaction.{phase}_interrupted",
                        attempt=attempt,
                        error=str(exc),
                    )
                    raise
                last_error = exc
                self.logger.warning(
                    f"transaction.{phase}_attempt_failed",
                    attempt=attempt,
                    max_attempts=attempts,
                    error=str(exc),
                )

            if attempt < attempts and not ctx.wait(wait_seconds):
                err = ctx.err()
                self.logger.warning(
                    f"transaction.{phase}_wait_interrupted",
                    attempt=attempt,
                    error=str(err),
                )
                raise err.renew()

        raise error_cls(
            last_error,
            attempts=attempts,
            backend_name=_backend_name(backend),
        ) from last_error
