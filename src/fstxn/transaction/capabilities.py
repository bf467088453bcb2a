"""Capability contracts a transaction backend implements.

A backend subclasses one or more of these. They share no behaviour; the
transaction core only ever calls the methods declared here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fstxn.context import Context


class Starter(ABC):
    """Opens a transaction on the backing store."""

    @abstractmethod
    def start(self, ctx: Context) -> None:
        """Make one attempt at opening the transaction.

        Raises on failure. Raising a context error stops the retry loop.
        """

    @abstractmethod
    def open_attempts(self) -> int:
        """Maximum number of open attempts."""


class Stopper(ABC):
    """Publishes and closes a transaction."""

    @abstractmethod
    def stop(self, ctx: Context) -> None:
        """Make one attempt at publishing and closing the transaction."""

    @abstractmethod
    def publish_attempts(self) -> int:
        """Maximum number of publish attempts."""

    @abstractmethod
    def publish_attempts_wait(self) -> float:
        """Seconds to wait between publish attempts."""


class Aborter(ABC):
    """Forcefully ends a transaction without publishing."""

    @abstractmethod
    def kill(self, ctx: Context) -> None:
        """Abort the ongoing transaction."""
