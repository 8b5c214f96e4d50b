"""Version Control System (VCS) port interface.

Defines the file-level operations an editor integration relies on. ArcFile
implements it; the CLI is written against it.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from arcsigns.domain.entities import BlameRecord


class VersionedFile(Protocol):
    """Protocol for a file tracked by a version control backend."""

    path: Path
    relpath: str | None
    content_hash: str | None
    mode_bits: str | None
    repo: Any

    async def update_info(self, update_relpath: bool = False, silent: bool = False) -> bool:
        """Refresh cached identity.

        Returns:
            True if the content hash changed.
        """
        ...

    async def get_show_text(self, revision: str) -> tuple[list[str], str | None]:
        """Get the file's content at a revision.

        Returns:
            Tuple of (lines, stderr text or None).
        """
        ...

    async def run_blame(self, line_number: int, ignore_whitespace: bool = False) -> BlameRecord:
        """Attribute a 1-based line to the commit that last changed it."""
        ...

    async def has_moved(self) -> str | None:
        """Return the new relative path if a rename is staged."""
        ...

    async def get_commit_body(self, commit_id: str) -> list[str]:
        """Get a commit's message lines."""
        ...

    async def unstage(self) -> None:
        """Remove the file from the staged set."""
        ...

    async def stage_lines(self, lines: Sequence[str]) -> None: ...

    async def stage_hunks(self, hunks: Sequence[Any], invert: bool = False) -> None: ...
