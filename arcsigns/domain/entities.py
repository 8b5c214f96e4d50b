"""Domain entities and value objects.

Result structures returned by the command layer. Each operation returns one
of these fixed shapes instead of an ad-hoc mapping, so every field has a
known type and optionality.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

NOT_COMMITTED_NAME = "Not Committed Yet"
NOT_COMMITTED_CONTACT = "<not.committed.yet>"

# Mode reported for every entry; the backend does not expose permission bits
DEFAULT_MODE_BITS = "100664"


@dataclass(frozen=True)
class ProcessOutput:
    """Raw result of running an external program.

    Attributes:
        stdout: Captured standard output.
        stderr: Captured standard error.
        returncode: Process exit status.
    """

    stdout: bytes
    stderr: bytes
    returncode: int


@dataclass(frozen=True)
class ArcVersion:
    """Parsed backend version. arc only reports a major number."""

    major: int
    minor: int = 0
    patch: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class RepositoryInfo:
    """Location and head state of a working tree.

    Attributes:
        root_path: Absolute path to the top of the working tree.
        metadata_path: Absolute path to the backend control directory.
        detached: True when the tree is not on a named branch.
        branch: Branch name, "HEAD" when detached, None when it could not be
            resolved. An empty string means the repository has no commits.
    """

    root_path: Path
    metadata_path: Path
    detached: bool
    branch: str | None


@dataclass(frozen=True)
class FileInfo:
    """Identity of one file as seen by the backend at a point in time.

    Attributes:
        relpath: Path relative to the working tree root, if resolved.
        content_hash: Hash of the live file content, None if unreadable.
        mode_bits: File mode marker.
        has_conflicts: True when the entry is in an unresolved merge state.
        index_crlf: Stored copy uses CRLF line endings.
        working_crlf: On-disk copy uses CRLF line endings.
    """

    relpath: str | None
    content_hash: str | None
    mode_bits: str = DEFAULT_MODE_BITS
    has_conflicts: bool | None = None
    index_crlf: bool = False
    working_crlf: bool = False


@dataclass(frozen=True)
class BlameRecord:
    """Attribution of a single line.

    A record without ``commit_id`` is the "not committed yet" sentinel, used
    for untracked files, uncommitted lines and repositories with no history.
    """

    author: str
    author_contact: str
    committer: str | None = None
    committer_contact: str | None = None
    commit_id: str | None = None
    abbreviated_commit_id: str | None = None
    author_time: int | None = None
    summary: str | None = None
    original_line_number: int | None = None
    final_line_number: int | None = None
    previous_commit_id: str | None = None
    previous_path: str | None = None
    path: str | None = None
    revision: str | int | None = None

    @property
    def is_committed(self) -> bool:
        return self.commit_id is not None

    @staticmethod
    def not_committed() -> BlameRecord:
        """Create the sentinel record for lines without history."""
        return BlameRecord(
            author=NOT_COMMITTED_NAME,
            author_contact=NOT_COMMITTED_CONTACT,
            committer=NOT_COMMITTED_NAME,
            committer_contact=NOT_COMMITTED_CONTACT,
        )
