"""Configuration I/O utilities for reading and writing TOML config files.

This module handles serialization/deserialization of ArcsignsConfig to/from
TOML format.
"""

import os
import platform
import tomllib
from dataclasses import asdict
from pathlib import Path
from typing import Any

import tomli_w

from arcsigns.domain.config import ArcsignsConfig

LOCAL_CONFIG_NAME = ".arcsigns.toml"


def get_global_config_path() -> Path:
    """Get the path to the global config file.

    The location is platform-dependent:
    - Linux/macOS: $XDG_CONFIG_HOME/arcsigns/config.toml or ~/.config/arcsigns/config.toml
    - Windows: %APPDATA%/arcsigns/config.toml

    Returns:
        Path to the global config file (may not exist)
    """
    if platform.system() == "Windows":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "arcsigns" / "config.toml"
        return Path.home() / ".config" / "arcsigns" / "config.toml"
    xdg_config = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg_config:
        return Path(xdg_config) / "arcsigns" / "config.toml"
    return Path.home() / ".config" / "arcsigns" / "config.toml"


def find_local_config(start_path: Path) -> Path | None:
    """Find the nearest .arcsigns.toml walking up from ``start_path``.

    Returns:
        Path to the local config file, or None if there is none.
    """
    current = start_path.resolve()
    while True:
        candidate = current / LOCAL_CONFIG_NAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_config_data(path: Path) -> dict[str, Any]:
    """Load raw TOML data from a config file.

    Args:
        path: Path to the TOML file

    Returns:
        Dictionary with parsed TOML data

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is malformed
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in config file: {e}") from e


def config_data_to_config(data: dict[str, Any]) -> ArcsignsConfig:
    """Convert raw config data dictionary to ArcsignsConfig.

    Raises:
        ValueError: If the data holds unknown keys or invalid values.
    """
    return ArcsignsConfig.from_partial(ArcsignsConfig.default(), data)


def load_config(path: Path) -> ArcsignsConfig:
    """Load configuration from a single TOML file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is malformed
    """
    return config_data_to_config(load_config_data(path))


def config_to_data(config: ArcsignsConfig) -> dict[str, Any]:
    """Convert a config to TOML-serializable data.

    TOML has no null, so unset optional values are left out.
    """
    data = asdict(config)
    return {
        section: {key: value for key, value in values.items() if value is not None}
        for section, values in data.items()
    }


def save_config(config: ArcsignsConfig, path: Path) -> None:
    """Save configuration to a TOML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(config_to_data(config), f)
