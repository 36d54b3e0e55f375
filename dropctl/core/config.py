"""Configuration management for dropctl.

Supports a YAML config file and environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from dropctl.core.exceptions import ConfigurationError

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "dropctl"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_TIMEOUT = 30.0
DEFAULT_CHUNK_SIZE = 256 * 1024
DEFAULT_SAMPLE_INTERVAL = 0.6

# Environment variable names
ENV_CONFIG = "DROPCTL_CONFIG"
ENV_TIMEOUT = "DROPCTL_TIMEOUT"
ENV_VERIFY_SSL = "DROPCTL_VERIFY_SSL"
ENV_CHUNK_SIZE = "DROPCTL_CHUNK_SIZE"
ENV_SAMPLE_INTERVAL = "DROPCTL_SAMPLE_INTERVAL"
ENV_STOP_ON_ERROR = "DROPCTL_STOP_ON_ERROR"
ENV_CHECKSUM = "DROPCTL_CHECKSUM"

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


def _parse_bool(raw: str, key: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Expected a boolean for {key}", field=key, value=raw)


def _parse_number(raw: str, key: str, kind: type) -> Any:
    try:
        value = kind(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Expected a number for {key}", field=key, value=raw)
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive", field=key, value=raw)
    return value


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Application configuration."""

    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    chunk_size: int = DEFAULT_CHUNK_SIZE
    sample_interval: float = DEFAULT_SAMPLE_INTERVAL
    stop_on_error: bool = True
    checksum: bool = False
    output_format: str = "table"

    @classmethod
    def load(cls, config_path: Optional[Path] = None, *, use_env: bool = True) -> "Config":
        """Load config from file with environment variable overrides.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file
        3. Defaults

        Args:
            config_path: Optional path to config file.
            use_env: Apply DROPCTL_* environment overrides.

        Returns:
            Loaded configuration.
        """
        path = config_path or default_config_path()
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config: {e}")
            if not isinstance(data, dict):
                raise ConfigurationError(f"Config file must contain a mapping: {path}")
            for key, value in data.items():
                if key in config.keys():
                    config.set_value(key, str(value))

        if not use_env:
            return config

        env_overrides = {
            ENV_TIMEOUT: "timeout",
            ENV_VERIFY_SSL: "verify_ssl",
            ENV_CHUNK_SIZE: "chunk_size",
            ENV_SAMPLE_INTERVAL: "sample_interval",
            ENV_STOP_ON_ERROR: "stop_on_error",
            ENV_CHECKSUM: "checksum",
        }
        for env_name, key in env_overrides.items():
            if (raw := os.getenv(env_name)) is not None:
                config.set_value(key, raw)

        return config

    def save(self, config_path: Optional[Path] = None) -> Path:
        """Save config to file.

        Args:
            config_path: Optional path to config file.

        Returns:
            Path written.
        """
        path = config_path or default_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
        return path

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def keys(cls) -> list[str]:
        """Names of all settable keys."""
        return [f.name for f in fields(cls)]

    def set_value(self, key: str, raw: str) -> None:
        """Set a key from its string form, coercing to the field type.

        Raises:
            ConfigurationError: If the key is unknown or the value is invalid.
        """
        if key in ("verify_ssl", "stop_on_error", "checksum"):
            value: Any = _parse_bool(raw, key)
        elif key == "chunk_size":
            value = _parse_number(raw, key, int)
        elif key in ("timeout", "sample_interval"):
            value = _parse_number(raw, key, float)
        elif key == "output_format":
            if raw not in ("table", "json"):
                raise ConfigurationError("output_format must be table or json", field=key, value=raw)
            value = raw
        else:
            raise ConfigurationError(f"Unknown config key: {key}", field=key)
        setattr(self, key, value)


def default_config_path() -> Path:
    """Config file location, honouring DROPCTL_CONFIG."""
    override = os.getenv(ENV_CONFIG)
    return Path(override) if override else CONFIG_FILE
