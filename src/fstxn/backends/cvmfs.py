"""CVMFS transaction backend.

Drives ``cvmfs_server`` on a release manager node: ``transaction`` opens the
repository for writing, ``publish`` commits it and ``abort -f`` throws the
changes away.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from pydantic import Field

from fstxn.backends.base import BackendOptions, BaseTransactionBackend
from fstxn.context import Context
from fstxn.transaction.core import Transaction

# Marker file turning a directory into a nested catalog
CATALOG_MARKER = ".cvmfscatalog"


class CvmfsOptions(BackendOptions):
    """Configures the CVMFS transaction."""

    # Path to the CVMFS server binary
    binary: str = Field(default="cvmfs_server", alias="cvmfs_server_binary")

    # Name of the nightly repo
    nightly_repo: str = Field(default="")

    # Machine with rights to contact the CVMFS gateway node
    release_manager: str = Field(default="")


class CvmfsBackend(BaseTransactionBackend):
    """Opens, publishes and aborts transactions on a CVMFS repository."""

    name = "cvmfs"

    def __init__(self, options: CvmfsOptions, catalog_dirs: Iterable[str | Path] = ()):
        super().__init__(options)
        self.options: CvmfsOptions = options
        self.catalog_dirs = [Path(d) for d in catalog_dirs]
        self.logger = self.logger.bind(repo=options.nightly_repo)

    @property
    def repo(self) -> str:
        return self.options.nightly_repo

    def start(self, ctx: Context) -> None:
        # Fails if a transaction is already ongoing on this node
        self._run(ctx, self.options.binary, "transaction", self.repo)

    def stop(self, ctx: Context) -> None:
        self.create_nested_catalogs()
        self._run(ctx, self.options.binary, "publish", self.repo)

    def kill(self, ctx: Context) -> None:
        self._run(ctx, self.options.binary, "abort", "-f", self.repo)

    def create_nested_catalogs(self) -> list[Path]:
        """Touch a catalog marker in each nested catalog directory.

        A directory that cannot be marked is logged and skipped; publishing
        goes ahead without it.

        Returns:
            The markers that were created or refreshed.
        """
        created = []
        for directory in self.catalog_dirs:
            marker = directory / CATALOG_MARKER
            try:
                directory.mkdir(parents=True, exist_ok=True)
                marker.touch(exist_ok=True)
            except OSError as exc:
                self.logger.error("cvmfs.catalog_failed", path=str(marker), error=str(exc))
                continue
            created.append(marker)
        return created


def new_transaction(options: CvmfsOptions, *catalog_dirs: str | Path) -> Transaction:
    """Create a CVMFS transaction.

    Call ``open()`` on the result and make sure ``close()`` follows, or use
    ``with txn.opened(ctx):``.
    """
    return Transaction.for_backend(CvmfsBackend(options, catalog_dirs))
