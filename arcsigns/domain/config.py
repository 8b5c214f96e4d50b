"""Config domain models for arcsigns.

Configuration is read from TOML (global user file plus an optional local
.arcsigns.toml) and describes how the backend is invoked. This module defines
the domain models that represent validated configuration state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Literal

DIFF_ALGORITHMS = ("myers", "minimal", "patience", "histogram")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class BackendConfig:
    """Configuration for the external programs that are invoked.

    Attributes:
        binary: Backend executable name or path.
        hash_program: Program used to hash live file content.
        id_program: Program used to look up the acting user's login.
        version: Backend version ("auto" to query the binary).
        command_timeout: Seconds before a command is killed, None for no limit.

    Raises:
        ValueError: If binary is empty or command_timeout is not positive.
    """

    binary: str = "arc"
    hash_program: str = "sha1sum"
    id_program: str = "id"
    version: str = "auto"
    command_timeout: float | None = None

    def __post_init__(self) -> None:
        """Validate backend config after initialization."""
        if not self.binary:
            raise ValueError("binary must not be empty")
        if self.command_timeout is not None and self.command_timeout <= 0:
            raise ValueError(
                f"command_timeout must be positive, got {self.command_timeout}"
            )


@dataclass(frozen=True)
class DiffConfig:
    """Configuration for two-file diffs.

    Attributes:
        algorithm: Diff algorithm passed to the backend.
        indent_heuristic: Whether to enable the indent heuristic.

    Raises:
        ValueError: If algorithm is not recognised.
    """

    algorithm: Literal["myers", "minimal", "patience", "histogram"] = "myers"
    indent_heuristic: bool = False

    def __post_init__(self) -> None:
        """Validate diff config after initialization."""
        if self.algorithm not in DIFF_ALGORITHMS:
            raise ValueError(
                f"algorithm must be one of {', '.join(DIFF_ALGORITHMS)}, "
                f"got {self.algorithm!r}"
            )


@dataclass(frozen=True)
class BlameConfig:
    """Configuration for blame queries."""

    ignore_whitespace: bool = False


@dataclass(frozen=True)
class LogConfig:
    """Configuration for diagnostics.

    Raises:
        ValueError: If level is not a known logging level name.
    """

    level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"level must be one of {', '.join(LOG_LEVELS)}, got {self.level!r}"
            )


@dataclass(frozen=True)
class ArcsignsConfig:
    """Complete arcsigns configuration.

    Attributes:
        backend: Backend invocation configuration
        diff: Diff configuration
        blame: Blame configuration
        log: Logging configuration
    """

    backend: BackendConfig = field(default_factory=BackendConfig)
    diff: DiffConfig = field(default_factory=DiffConfig)
    blame: BlameConfig = field(default_factory=BlameConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @staticmethod
    def default() -> ArcsignsConfig:
        """Create a config with all default values."""
        return ArcsignsConfig(
            backend=BackendConfig(),
            diff=DiffConfig(),
            blame=BlameConfig(),
            log=LogConfig(),
        )

    @staticmethod
    def from_partial(base: ArcsignsConfig, data: dict[str, Any]) -> ArcsignsConfig:
        """Overlay partial TOML data onto an existing config.

        Sections missing from ``data`` keep the base values. Each overridden
        section is rebuilt through its dataclass so validation runs again.

        Args:
            base: Config to start from.
            data: Raw config data, keyed by section name.

        Returns:
            New ArcsignsConfig with the overrides applied.

        Raises:
            ValueError: If a section contains unknown keys or invalid values.
        """
        updates: dict[str, Any] = {}
        for section in fields(base):
            section_data = data.get(section.name)
            if not section_data:
                continue
            if not isinstance(section_data, dict):
                raise ValueError(f"Section [{section.name}] must be a table")
            current = getattr(base, section.name)
            known = {f.name for f in fields(current)}
            unknown = set(section_data) - known
            if unknown:
                raise ValueError(
                    f"Unknown keys in [{section.name}]: {', '.join(sorted(unknown))}"
                )
            updates[section.name] = replace(current, **section_data)
        return replace(base, **updates)
