"""Configuration system for fstxn.

Implements layered configuration with the following priority (high → low):
1) Explicit overrides passed to ``ConfigService.load``
2) Environment variables (prefix: FSTXN_, ``__`` separates nested keys)
3) User config file (~/.fstxn/config.yaml)
4) Project config file (./fstxn.yaml)
5) Built-in defaults
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from fstxn.config.defaults import (
    DEFAULT_CONFIG,
    ENV_PREFIX,
    PROJECT_CONFIG_FILENAME,
    USER_CONFIG_PATH,
)


class GeneralSettings(BaseModel):
    verbosity: str = Field(default="info")
    output_format: str = Field(default="text")
    color_enabled: bool = Field(default=True)


class TransactionSettings(BaseModel):
    open_attempts: int = Field(default=3, ge=1)
    publish_attempts: int = Field(default=3, ge=1)
    publish_attempts_wait: float = Field(default=10, ge=0)


class BackendsSettings(BaseModel):
    default_backend: str = Field(default="cvmfs")
    cvmfs: dict[str, Any] = Field(default_factory=dict)
    afs: dict[str, Any] = Field(default_factory=dict)


class Settings(BaseModel):
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    transaction: TransactionSettings = Field(default_factory=TransactionSettings)
    backends: BackendsSettings = Field(default_factory=BackendsSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        return cls.model_validate(data)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base, returning a new dict."""

    result = {**base}
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Failed to parse YAML config at {path}: {exc}") from exc


def _parse_scalar(value: str) -> Any:
    """Best-effort parsing for env string values."""

    trimmed = value.strip()
    # JSON covers numbers, booleans, null and quoted strings
    try:
        return json.loads(trimmed)
    except json.JSONDecodeError:
        pass

    lowered = trimmed.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"none", "null"}:
        return None
    return trimmed


def _set_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    current = target
    for key in path[:-1]:
        current = current.setdefault(key, {})
    current[path[-1]] = value


class ConfigService:
    """Loads and merges fstxn configuration."""

    def __init__(
        self,
        env_prefix: str = ENV_PREFIX,
        project_dir: Path | None = None,
        user_config_path: Path | None = None,
    ):
        self.env_prefix = env_prefix
        self.project_config_path = (project_dir or Path.cwd()) / PROJECT_CONFIG_FILENAME
        self.user_config_path = user_config_path or USER_CONFIG_PATH

    def load(self, overrides: dict[str, Any] | None = None) -> Settings:
        data = DEFAULT_CONFIG

        for path in (self.project_config_path, self.user_config_path):
            data = _deep_merge(data, _load_yaml(path))

        data = _deep_merge(data, self._env_overrides())
        if overrides:
            data = _deep_merge(data, overrides)

        try:
            return Settings.from_dict(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid configuration: {exc}") from exc

    def _env_overrides(self) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        prefix = f"{self.env_prefix}_"
        for key, raw_value in os.environ.items():
            if not key.startswith(prefix):
                continue
            segments = [s.lower() for s in key[len(prefix) :].split("__") if s]
            if segments:
                _set_nested(overrides, segments, _parse_scalar(raw_value))
        return overrides


config_service = ConfigService()

_cached_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _cached_settings
    if _cached_settings is None:
        _cached_settings = config_service.load()
    return _cached_settings


def reload_settings() -> Settings:
    """Reload settings from configuration sources."""
    global _cached_settings
    _cached_settings = config_service.load()
    return _cached_settings
