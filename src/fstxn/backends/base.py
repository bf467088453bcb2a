"""Shared base for transaction backends."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from fstxn.backends import shell
from fstxn.context import Context
from fstxn.transaction.capabilities import Aborter, Starter, Stopper
from fstxn.utils.logging import get_logger


class BackendOptions(BaseModel):
    """Options common to every backend."""

    model_config = ConfigDict(populate_by_name=True)

    # User with the necessary rights to install
    sudo_user: str = Field(default="")

    # How many times we try to open our own transaction
    max_transaction_open_attempts: int = Field(default=3, ge=1)

    # How many times we try to publish before giving up
    max_publish_attempts: int = Field(default=3, ge=1)

    # Seconds between publish attempts
    publish_attempts_wait: float = Field(default=10, ge=0)


class BaseTransactionBackend(Starter, Stopper, Aborter):
    """A backend providing all three capabilities from one set of options.

    Attempt counts are read from the options on every call, so changing
    ``options`` between transactions takes effect immediately.
    """

    name: str = "base"

    def __init__(self, options: BackendOptions):
        self.options = options
        self.logger = get_logger(f"backends.{self.name}")

    def open_attempts(self) -> int:
        return self.options.max_transaction_open_attempts

    def publish_attempts(self) -> int:
        return self.options.max_publish_attempts

    def publish_attempts_wait(self) -> float:
        return self.options.publish_attempts_wait

    def _command(self, *args: str) -> list[str]:
        """Build an argv, running as the sudo user when one is configured."""
        argv = list(args)
        if self.options.sudo_user:
            argv = ["sudo", "-u", self.options.sudo_user, *argv]
        return argv

    def _run(self, ctx: Context, *args: str) -> shell.CommandResult:
        """Run a command, log its output line by line and raise on failure."""
        result = shell.run(self._command(*args), ctx)
        for line in result.stdout_lines:
            self.logger.info(line)
        for line in result.stderr_lines:
            self.logger.error(line)
        return result.check()
