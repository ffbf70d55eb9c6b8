"""Configuration management — TOML config at ~/.config/ghostpad/ghostpad.toml."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

import tomli_w

from ghostpad.core.exceptions import ConfigError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

_DEFAULT_CONFIG: dict[str, Any] = {
    "general": {
        "data_dir": "~/.local/share/ghostpad",
    },
    "editor": {
        "wait_time_ms": 500,
        "model": "gpt-3.5-turbo",
        "prompt": "",
        "initial_text": "Der Satz des Pythagoras ist",
    },
    "server": {
        "host": "127.0.0.1",
        "port": 3000,
        "password": "",
    },
    "gateway": {
        "endpoint": "",
        "temperature": 0.25,
        "max_tokens": 256,
        "timeout_seconds": 30.0,
    },
    "logging": {
        "level": "WARNING",
        "file": "",
    },
}


def get_config_dir() -> Path:
    """Return the config directory, creating it if needed."""
    config_dir = Path(os.environ.get("GHOSTPAD_CONFIG_DIR", "~/.config/ghostpad")).expanduser()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path() -> Path:
    """Return the path to the config TOML file."""
    return get_config_dir() / "ghostpad.toml"


def get_data_dir(config: dict[str, Any] | None = None) -> Path:
    """Return the data directory, creating it if needed."""
    if config is None:
        config = load_config()
    data_dir = Path(config.get("general", {}).get("data_dir", "~/.local/share/ghostpad")).expanduser()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_log_path(config: dict[str, Any] | None = None) -> Path:
    """Return the log file used while the full-screen editor owns the terminal."""
    if config is None:
        config = load_config()
    configured = config.get("logging", {}).get("file", "")
    if configured:
        return Path(configured).expanduser()
    return get_data_dir(config) / "ghostpad.log"


def get_server_password(config: dict[str, Any] | None = None) -> str:
    """Shared password for the completion endpoint. The environment wins over the file."""
    if config is None:
        config = load_config()
    return os.environ.get("GHOSTPAD_PASSWORD", config.get("server", {}).get("password", ""))


def load_config() -> dict[str, Any]:
    """Load configuration from TOML file, returning defaults if not found."""
    config_path = get_config_path()
    if not config_path.exists():
        return _deep_copy_dict(_DEFAULT_CONFIG)
    try:
        with open(config_path, "rb") as f:
            user_config = tomllib.load(f)
        return _merge_config(_deep_copy_dict(_DEFAULT_CONFIG), user_config)
    except Exception as e:
        raise ConfigError(f"Failed to load config: {e}") from e


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to TOML file."""
    config_path = get_config_path()
    try:
        with open(config_path, "wb") as f:
            tomli_w.dump(config, f)
    except Exception as e:
        raise ConfigError(f"Failed to save config: {e}") from e


def update_config(**updates: Any) -> dict[str, Any]:
    """Load config, apply nested updates, save, and return the result.

    Usage: update_config(editor={"wait_time_ms": 800}, server={"port": 8080})
    """
    config = load_config()
    for section, values in updates.items():
        if section not in config:
            config[section] = {}
        if isinstance(values, dict):
            config[section].update(values)
        else:
            config[section] = values
    save_config(config)
    return config


def _merge_config(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge override into base."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_config(base[key], value)
        else:
            base[key] = value
    return base


def _deep_copy_dict(d: dict[str, Any]) -> dict[str, Any]:
    """Simple deep copy for nested dicts of simple types."""
    result: dict[str, Any] = {}
    for k, v in d.items():
        if isinstance(v, dict):
            result[k] = _deep_copy_dict(v)
        else:
            result[k] = v
    return result
