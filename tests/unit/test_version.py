"""Tests for arcsigns.version module."""

import re

from arcsigns.version import __version__


class TestVersion:
    """Tests for version constant."""

    def test_version_is_string(self) -> None:
        """Version should be a string."""
        assert isinstance(__version__, str)

    def test_version_matches_semver_pattern(self) -> None:
        """Version should follow semantic versioning pattern."""
        semver_pattern = r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?(\+[a-zA-Z0-9.]+)?$"
        assert re.match(
            semver_pattern, __version__
        ), f"Version '{__version__}' does not match semver pattern"
