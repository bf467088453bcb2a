"""Configuration module for fstxn.

Layered configuration loading (overrides > env > user > project > defaults)
with pydantic-based validation.
"""

from fstxn.config.defaults import (
    DEFAULT_CONFIG,
    ENV_PREFIX,
    PROJECT_CONFIG_FILENAME,
    USER_CONFIG_PATH,
)
from fstxn.config.settings import (
    BackendsSettings,
    ConfigService,
    GeneralSettings,
    Settings,
    TransactionSettings,
    config_service,
    get_settings,
    reload_settings,
)

__all__ = [
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "PROJECT_CONFIG_FILENAME",
    "USER_CONFIG_PATH",
    "BackendsSettings",
    "ConfigService",
    "GeneralSettings",
    "Settings",
    "TransactionSettings",
    "config_service",
    "get_settings",
    "reload_settings",
]
