"""Default configuration values and constants for configuration loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Default configuration tree used when no files are present.
DEFAULT_CONFIG: dict[str, Any] = {
    "general": {
        "verbosity": "info",
        "output_format": "text",
        "color_enabled": True,
    },
    "transaction": {
        # How many times to try opening a transaction before giving up
        "open_attempts": 3,
        # How many times to try publishing (closing) a transaction
        "publish_attempts": 3,
        # Seconds to wait between publish attempts
        "publish_attempts_wait": 10,
    },
    "backends": {
        "default_backend": "cvmfs",
        "cvmfs": {},
        "afs": {},
    },
}

ENV_PREFIX = "FSTXN"
PROJECT_CONFIG_FILENAME = "fstxn.yaml"
USER_CONFIG_PATH = Path.home() / ".fstxn" / "config.yaml"
