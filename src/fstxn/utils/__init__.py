"""Shared utilities."""

from fstxn.utils.logging import (
    configure_from_settings,
    configure_logging,
    get_logger,
    timed_operation,
)

__all__ = [
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "timed_operation",
]
