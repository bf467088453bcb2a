"""Backend registry: build backends and transactions by name."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from fstxn.backends.afs import AfsBackend, AfsOptions
from fstxn.backends.base import BaseTransactionBackend
from fstxn.backends.cvmfs import CvmfsBackend, CvmfsOptions
from fstxn.config.settings import Settings, get_settings
from fstxn.transaction.core import Transaction
from fstxn.utils.logging import get_logger

logger = get_logger(__name__)

BackendFactory = Callable[[Mapping[str, Any], tuple[Any, ...]], BaseTransactionBackend]

_FACTORIES: dict[str, BackendFactory] = {
    "cvmfs": lambda opts, extra: CvmfsBackend(CvmfsOptions.model_validate(opts), extra),
    "afs": lambda opts, extra: AfsBackend(AfsOptions.model_validate(opts)),
}


def available_backends() -> list[str]:
    """Return the names of the registered backends."""
    return sorted(_FACTORIES)


def _resolve_options(
    name: str,
    options: Mapping[str, Any] | None,
    settings: Settings,
) -> dict[str, Any]:
    """Merge explicit options over configured ones over transaction defaults."""
    defaults = {
        "max_transaction_open_attempts": settings.transaction.open_attempts,
        "max_publish_attempts": settings.transaction.publish_attempts,
        "publish_attempts_wait": settings.transaction.publish_attempts_wait,
    }
    configured = getattr(settings.backends, name, {}) or {}
    return {**defaults, **configured, **(options or {})}


def create_backend(
    name: str | None = None,
    options: Mapping[str, Any] | None = None,
    *extra: Any,
    settings: Settings | None = None,
) -> BaseTransactionBackend:
    """Create a backend by name.

    Args:
        name: Registered backend name; defaults to ``backends.default_backend``.
        options: Backend options overriding the configured ones.
        *extra: Extra positional arguments for the backend (e.g. CVMFS
            nested catalog directories).
        settings: Settings to use instead of the global ones.

    Raises:
        KeyError: If no backend is registered under ``name``.
    """
    settings = settings or get_settings()
    name = name or settings.backends.default_backend
    if name not in _FACTORIES:
        raise KeyError(f"Unknown backend '{name}'. Available: {', '.join(available_backends())}")

    resolved = _resolve_options(name, options, settings)
    logger.debug("registry.create_backend", backend=name)
    return _FACTORIES[name](resolved, extra)


def create_transaction(
    name: str | None = None,
    options: Mapping[str, Any] | None = None,
    *extra: Any,
    settings: Settings | None = None,
) -> Transaction:
    """Create a Transaction for the named backend."""
    return Transaction.for_backend(create_backend(name, options, *extra, settings=settings))
