"""Transaction backends for publish/release filesystems."""

from fstxn.backends.afs import AfsBackend, AfsOptions
from fstxn.backends.base import BackendOptions, BaseTransactionBackend
from fstxn.backends.cvmfs import CATALOG_MARKER, CvmfsBackend, CvmfsOptions
from fstxn.backends.registry import (
    available_backends,
    create_backend,
    create_transaction,
)
from fstxn.backends.shell import CommandError, CommandResult

__all__ = [
    "AfsBackend",
    "AfsOptions",
    "BackendOptions",
    "BaseTransactionBackend",
    "CATALOG_MARKER",
    "CvmfsBackend",
    "CvmfsOptions",
    "available_backends",
    "create_backend",
    "create_transaction",
    "CommandError",
    "CommandResult",
]
