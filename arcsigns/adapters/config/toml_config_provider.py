"""TOML-based configuration provider.

Config loading priority (highest to lowest):
1. Local: nearest .arcsigns.toml above the working directory
2. Global: ~/.config/arcsigns/config.toml (user defaults)
3. Built-in defaults
"""

import logging
from pathlib import Path

from arcsigns.domain.config import ArcsignsConfig
from arcsigns.shared.config_io import (
    find_local_config,
    get_global_config_path,
    load_config_data,
)

logger = logging.getLogger(__name__)


class TomlConfigProvider:
    """Configuration provider that loads from TOML files.

    Local values override global values (section-level merge) and missing
    values fall back to built-in defaults. Invalid files are skipped with a
    warning.
    """

    def load(self, start_path: Path, explicit_path: Path | None = None) -> ArcsignsConfig:
        """Load configuration with global fallback.

        Args:
            start_path: Directory to search for a local config from.
            explicit_path: Config file to use instead of the local search.

        Returns:
            ArcsignsConfig with merged global/local values or defaults
        """
        config = ArcsignsConfig.default()

        global_path = get_global_config_path()
        if global_path.exists():
            config = self._apply(config, global_path, "global")

        local_path = explicit_path or find_local_config(start_path)
        if local_path is not None:
            config = self._apply(config, local_path, "local")

        return config

    @staticmethod
    def _apply(config: ArcsignsConfig, path: Path, kind: str) -> ArcsignsConfig:
        try:
            data = load_config_data(path)
            merged = ArcsignsConfig.from_partial(config, data)
        except (FileNotFoundError, ValueError, TypeError) as e:
            logger.warning(
                "Failed to parse %s config at %s: %s. Ignoring it.",
                kind,
                path,
                e,
            )
            return config
        logger.debug("Loaded %s config from %s", kind, path)
        return merged
