"""Cancellation and deadline propagation for blocking operations.

Every transaction operation receives a :class:`Context`. Waits between retry
attempts and backend commands watch it, so a caller can cancel outstanding
work from another thread or bound it with a deadline.

Contexts form a tree: cancelling a parent cancels all of its children, and a
child never outlives its parent's deadline.
"""

from __future__ import annotations

import threading
import time


# =============================================================================
# Errors
# =============================================================================


class ContextError(Exception):
    """Base class for errors reporting that a context is done.

    A context stores one instance and hands it to every caller of
    ``Context.err()``. Raise ``renew()`` rather than the stored instance so
    each raise gets its own traceback.
    """

    def renew(self) -> ContextError:
        """Return a fresh instance of this error, suitable for raising."""
        return type(self)(*self.args)


class Cancelled(ContextError):
    """Raised when the context was cancelled."""

    def __init__(self, message: str = "context cancelled") -> None:
        super().__init__(message)


class DeadlineExceeded(ContextError, TimeoutError):
    """Raised when the context deadline passed."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


def is_context_error(exc: BaseException | None) -> bool:
    """Check whether ``exc`` is, or was caused by, a context error.

    Follows explicit ``raise ... from`` causes only, so a backend may wrap a
    cancellation in its own exception type. An error merely raised while a
    context error was being handled is not a cancellation.
    """
    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        if isinstance(exc, ContextError):
            return True
        seen.add(id(exc))
        exc = exc.__cause__
    return False


# =============================================================================
# Context
# =============================================================================


class Context:
    """A cancellation signal with an optional deadline.

    Deadlines are expressed on the ``time.monotonic()`` clock.
    """

    def __init__(
        self,
        parent: Context | None = None,
        deadline: float | None = None,
    ) -> None:
        self._parent = parent
        self._done = threading.Event()
        self._err: ContextError | None = None
        self._lock = threading.Lock()
        self._children: set[Context] = set()

        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._deadline = deadline

        if parent is not None:
            parent._add_child(self)

    def _add_child(self, child: Context) -> None:
        with self._lock:
            if self._err is None:
                self._children.add(child)
                return
            err = self._err
        child._finish(err)

    def _finish(self, err: ContextError) -> None:
        with self._lock:
            if self._err is not None:
                return
            self._err = err
            children, self._children = self._children, set()
        self._done.set()
        for child in children:
            child._finish(err)
        if self._parent is not None:
            self._parent._remove_child(self)

    def _remove_child(self, child: Context) -> None:
        with self._lock:
            self._children.discard(child)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self) -> None:
        """Cancel this context and all of its children."""
        self._finish(Cancelled())

    def err(self) -> ContextError | None:
        """Return why the context is done, or None while it is still live."""
        if self._err is None and self._deadline is not None:
            if time.monotonic() >= self._deadline:
                self._finish(DeadlineExceeded())
        return self._err

    @property
    def done(self) -> bool:
        return self.err() is not None

    def check(self) -> None:
        """Raise the context error if the context is done.

        Raises:
            Cancelled: If the context was cancelled.
            DeadlineExceeded: If the deadline passed.
        """
        err = self.err()
        if err is not None:
            raise err.renew()

    def wait(self, seconds: float) -> bool:
        """Block for ``seconds`` unless the context finishes first.

        Args:
            seconds: Delay to wait.

        Returns:
            True if the full delay elapsed, False if the context was
            cancelled or its deadline passed during the wait.
        """
        if self.err() is not None:
            return False

        timeout = max(0.0, seconds)
        remaining = self.remaining()
        if remaining is not None and remaining < timeout:
            # Wake at the deadline so it can be reported
            self._done.wait(remaining)
            self.err()
            return False

        if self._done.wait(timeout):
            return False
        return self.err() is None


# =============================================================================
# Constructors
# =============================================================================


class _BackgroundContext(Context):
    """Root context: never cancelled, keeps no reference to its children."""

    def _add_child(self, child: Context) -> None:
        pass

    def cancel(self) -> None:
        pass


_BACKGROUND = _BackgroundContext()


def background() -> Context:
    """Return the root context, which is never cancelled."""
    return _BACKGROUND


def with_cancel(parent: Context) -> Context:
    """Return a child context cancelled via its own ``cancel()``."""
    return Context(parent)


def with_deadline(parent: Context, deadline: float) -> Context:
    """Return a child context expiring at ``deadline`` (monotonic clock).

    A context that has expired is detached from ``parent`` the first time
    its error is read.
    """
    return Context(parent, deadline=deadline)


def with_timeout(parent: Context, seconds: float) -> Context:
    """Return a child context expiring ``seconds`` from now.

    Call ``cancel()`` once the work is done to detach it from ``parent``
    before the deadline.
    """
    return with_deadline(parent, time.monotonic() + seconds)
