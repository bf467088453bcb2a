"""AFS transaction backend.

AFS volumes are written in place, so there is nothing to open, publish or
abort. The backend only honours cancellation and logs each phase.
"""

from __future__ import annotations

from fstxn.backends.base import BackendOptions, BaseTransactionBackend
from fstxn.context import Context
from fstxn.transaction.core import Transaction


class AfsOptions(BackendOptions):
    """Configures the AFS transaction."""


class AfsBackend(BaseTransactionBackend):
    name = "afs"

    def __init__(self, options: AfsOptions):
        super().__init__(options)

    def start(self, ctx: Context) -> None:
        ctx.check()
        self.logger.debug("afs.start")

    def stop(self, ctx: Context) -> None:
        ctx.check()
        self.logger.debug("afs.stop")

    def kill(self, ctx: Context) -> None:
        ctx.check()
        self.logger.debug("afs.kill")


def new_transaction(options: AfsOptions) -> Transaction:
    """Create an AFS transaction."""
    return Transaction.for_backend(AfsBackend(options))
