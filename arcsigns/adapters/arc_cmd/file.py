"""File handle: one file of interest inside an arc working tree."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from arcsigns.adapters.arc_cmd.blame import interpret_blame
from arcsigns.adapters.arc_cmd.command import ArcCommandRunner
from arcsigns.adapters.arc_cmd.repository import (
    METADATA_DIR_NAME,
    ArcRepository,
    RepositoryCache,
)
from arcsigns.adapters.messages.click_sink import ClickMessageSink
from arcsigns.domain.entities import BlameRecord, FileInfo
from arcsigns.ports.messages import MessageSink

logger = logging.getLogger(__name__)

# "arc dump entry" failures look like "<message>: <relpath>"
_ERROR_PREFIX_RE = re.compile(r"^.*: ", re.DOTALL)


def in_metadata_dir(path: Path) -> bool:
    """Whether ``path`` lies inside a backend control directory."""
    return METADATA_DIR_NAME in path.parts


def strip_file_list(lines: list[str]) -> list[str]:
    """Drop the trailing block of path-like lines from 'show --name-only'."""
    end = len(lines)
    while end > 0 and "/" in lines[end - 1]:
        end -= 1
    return lines[:end]


class ArcFile:
    """A tracked (or untracked) file and its cached backend identity.

    Attributes:
        path: Current absolute on-disk path.
        encoding: Declared text encoding of the content.
        repo: Shared repository handle.
        relpath: Path relative to the tree root as known to the backend.
        orig_relpath: Path before a detected rename; set once.
        content_hash: Hash of the current content.
        mode_bits: File mode marker.
        has_conflicts: Set when the entry is in an unresolved merge state.
        index_crlf: Stored copy uses CRLF line endings.
        working_crlf: On-disk copy uses CRLF line endings.
    """

    def __init__(
        self,
        path: Path,
        encoding: str,
        repo: ArcRepository,
        messages: MessageSink | None = None,
        hash_program: str = "sha1sum",
    ) -> None:
        self.path = path
        self.encoding = encoding
        self.repo = repo
        self.messages: MessageSink = messages or ClickMessageSink()
        self.hash_program = hash_program

        self.relpath: str | None = None
        self.orig_relpath: str | None = None
        self.content_hash: str | None = None
        self.mode_bits: str | None = None
        self.has_conflicts: bool | None = None
        self.index_crlf = False
        self.working_crlf = False

    @classmethod
    async def open(
        cls,
        path: Path,
        encoding: str = "utf-8",
        *,
        runner: ArcCommandRunner,
        metadata_path: Path | None = None,
        root_path: Path | None = None,
        cache: RepositoryCache | None = None,
        messages: MessageSink | None = None,
        hash_program: str = "sha1sum",
    ) -> ArcFile | None:
        """Create a handle for ``path``.

        Args:
            path: Absolute path to the file.
            encoding: Declared encoding of the file content.
            runner: Command runner.
            metadata_path: Known control directory, if any.
            root_path: Known tree root, if any. Passing both known paths
                makes the first inspection silent.
            cache: Repository cache for sharing handles between files.
            messages: Sink for user-visible notices.
            hash_program: Program used to hash live content.

        Returns:
            ArcFile, or None when the path is in a control directory or not
            in a working tree.
        """
        if in_metadata_dir(path):
            logger.debug(f"In arc dir: {path}")
            return None

        if cache is not None:
            repo = await cache.get(path.parent, root_path)
        else:
            repo = await ArcRepository.open(runner, path.parent)
        if repo is None:
            logger.debug(f"Not in arc repo: {path}")
            return None

        silent = metadata_path is not None and root_path is not None

        self = cls(path, encoding, repo, messages, hash_program)
        await self.update_info(update_relpath=True, silent=silent)
        return self

    def __repr__(self) -> str:
        return f"ArcFile(path={str(self.path)!r}, relpath={self.relpath!r})"

    async def command(self, args: list[str], **kwargs: Any) -> tuple[list[str], str | None]:
        """Run a backend command rooted at the file's working tree."""
        return await self.repo.command_lines(args, **kwargs)

    async def file_info(self, silent: bool = False) -> FileInfo:
        """Inspect the entry for this file.

        When the backend reports an error the relative path is recovered from
        the error text, so files it does not know about can still be used.
        The content hash always comes from the live file.

        Args:
            silent: Do not log stderr from the inspection.

        Returns:
            FileInfo describing the current state.
        """
        results, stderr = await self.command(
            ["dump", "entry", str(self.path)], suppress_stderr=silent
        )
        if stderr:
            relpath: str | None = _ERROR_PREFIX_RE.sub("", stderr.strip(), count=1)
        else:
            relpath = results[0] if results else None

        hash_lines, _ = await self.repo.runner.run_lines(
            [str(self.path)],
            program=self.hash_program,
            cwd=self.repo.root_path,
            suppress_stderr=silent,
        )
        fields = hash_lines[0].split() if hash_lines else []
        content_hash = fields[0] if fields else None

        return FileInfo(relpath=relpath or None, content_hash=content_hash)

    async def update_info(self, update_relpath: bool = False, silent: bool = False) -> bool:
        """Refresh cached identity.

        All derived fields are replaced together from one FileInfo.

        Args:
            update_relpath: Also replace the relative path.
            silent: Do not log stderr from the inspection.

        Returns:
            True if the content hash changed.
        """
        old_hash = self.content_hash
        info = await self.file_info(silent)

        if update_relpath:
            self.relpath = info.relpath
        self.content_hash = info.content_hash
        self.mode_bits = info.mode_bits
        self.has_conflicts = info.has_conflicts
        self.index_crlf = info.index_crlf
        self.working_crlf = info.working_crlf

        return old_hash != self.content_hash

    async def get_show_text(self, revision: str) -> tuple[list[str], str | None]:
        """Get the file's content at ``revision``.

        Returns:
            Tuple of (lines, stderr text or None). Empty when the relative
            path is not known.
        """
        if not self.relpath:
            return [], None

        lines, stderr = await self.repo.get_show_text(
            f"{revision}:{self.relpath}", self.encoding
        )

        if not self.index_crlf and self.working_crlf:
            lines = [line + "\r" for line in lines]

        return lines, stderr

    async def unstage(self) -> None:
        """Remove the file from the staged set."""
        await self.command(["reset", str(self.path)])

    async def run_blame(self, line_number: int, ignore_whitespace: bool = False) -> BlameRecord:
        """Attribute one line.

        Untracked files and repositories without commits (empty branch name)
        get the not-committed sentinel without querying the backend.

        Args:
            line_number: 1-based line number.
            ignore_whitespace: Ignore whitespace changes when attributing.

        Returns:
            BlameRecord for the line.
        """
        if not self.content_hash or self.repo.branch == "":
            return BlameRecord.not_committed()

        args = ["blame", "--json", str(self.path)]
        if ignore_whitespace:
            args.append("-w")

        report, _ = await self.repo.command_structured(args)
        return interpret_blame(report, line_number)

    async def ensure_in_index(self) -> None:
        """Add the file to the index if it is not tracked yet."""
        if self.content_hash and not self.has_conflicts:
            return

        if not self.content_hash:
            await self.command(["add", str(self.path)])
        await self.update_info()

    async def stage_lines(self, lines: Sequence[str]) -> None:
        """Staging arbitrary content is not available with arc."""
        self.messages.notify("Arc does not support stage_lines")

    async def stage_hunks(self, hunks: Sequence[Any], invert: bool = False) -> None:
        """Staging hunks is not available with arc."""
        self.messages.notify("Arc does not support stage_hunks")

    async def has_moved(self) -> str | None:
        """Detect a staged rename of this file.

        Returns:
            The new relative path, or None if no rename is staged.
        """
        out, _ = await self.command(["diff", "--name-status", "--cached"])
        orig_relpath = self.orig_relpath or self.relpath
        for line in out:
            parts = line.split()
            if len(parts) != 3:
                continue
            orig, new = parts[1], parts[2]
            if orig_relpath == orig:
                self.orig_relpath = orig_relpath
                self.relpath = new
                self.path = self.repo.root_path / new
                return new
        return None

    async def get_commit_body(self, commit_id: str) -> list[str]:
        """Get a commit's message without its trailing file list."""
        lines, _ = await self.command(["show", "--git", "--name-only", commit_id])
        return strip_file_list(lines)
