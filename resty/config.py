"""Configuration management for Resty."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CONNECTION_TIMEOUT = 5000
DEFAULT_READ_TIMEOUT = 5000
DEFAULT_MEDIA_TYPE = "application/json"


class RestyConfig(BaseModel):
    """Defaults applied to every request made through a Resty client."""

    model_config = ConfigDict(frozen=True)

    # Accept any TLS certificate. Local and mock endpoints only.
    dev_mode: bool = Field(default=False)

    # Milliseconds, 0 disables the limit
    connection_timeout: int = Field(default=DEFAULT_CONNECTION_TIMEOUT, ge=0)
    read_timeout: int = Field(default=DEFAULT_READ_TIMEOUT, ge=0)

    media_type: str = Field(default=DEFAULT_MEDIA_TYPE)

    # Worker threads for future-based requests, None lets the executor decide
    max_workers: Optional[int] = Field(default=None, gt=0)

    @classmethod
    def from_environment(cls) -> "RestyConfig":
        """Create configuration from ``RESTY_*`` environment variables."""
        config_data = {
            "dev_mode": _get_bool("RESTY_DEV_MODE", False),
            "connection_timeout": os.getenv(
                "RESTY_CONNECTION_TIMEOUT", DEFAULT_CONNECTION_TIMEOUT
            ),
            "read_timeout": os.getenv("RESTY_READ_TIMEOUT", DEFAULT_READ_TIMEOUT),
            "media_type": os.getenv("RESTY_MEDIA_TYPE") or DEFAULT_MEDIA_TYPE,
        }

        if max_workers := os.getenv("RESTY_MAX_WORKERS"):
            config_data["max_workers"] = max_workers

        return cls(**config_data)


def _get_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# Global configuration instance
_config: Optional[RestyConfig] = None


def get_config(*, reload: bool = False) -> RestyConfig:
    """Get the global configuration instance."""
    global _config

    if _config is None or reload:
        _config = RestyConfig.from_environment()

    return _config


def load_dotenv_for_sdk(path: Optional[Path] = None, *, override: bool = False) -> bool:
    """Load environment variables from a .env file.

    Without ``path``, ``.env`` in the current working directory is used.
    Returns whether a file was found and loaded.
    """
    if path is None:
        path = Path.cwd() / ".env"

    if not path.exists():
        return False

    load_dotenv(path, override=override)
    return True
