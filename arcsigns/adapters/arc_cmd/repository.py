"""Repository handle for an arc working tree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from arcsigns.adapters.arc_cmd.command import ArcCommandRunner
from arcsigns.core.encoding import normalize_lines
from arcsigns.domain.entities import RepositoryInfo

logger = logging.getLogger(__name__)

METADATA_DIR_NAME = ".arc"
DETACHED_BRANCH = "HEAD"

_DETACHED_PREFIX = "detached: true"
_BRANCH_PREFIX = "branch:"


def parse_branch(info_lines: list[str]) -> str | None:
    """Extract the branch from 'arc info' output.

    Returns:
        "HEAD" when detached, the branch name when one is reported, or None
        when neither line is present.
    """
    for line in info_lines:
        if line.startswith(_DETACHED_PREFIX):
            return DETACHED_BRANCH
        if line.startswith(_BRANCH_PREFIX):
            return line[len(_BRANCH_PREFIX) :].strip()
    logger.warning("Can't find branch or detached in 'arc info'")
    return None


async def resolve_repo_info(
    runner: ArcCommandRunner,
    path: Path,
    program: str | None = None,
) -> RepositoryInfo | None:
    """Locate the working tree containing ``path``.

    Args:
        runner: Command runner.
        path: Directory to resolve from.
        program: Backend binary to use instead of the runner's default.

    Returns:
        RepositoryInfo, or None when ``path`` is not inside a working tree.
    """
    results, _ = await runner.run_lines(
        ["rev-parse", "--show-toplevel", "--arc-dir"],
        program=program,
        cwd=path,
        suppress_stderr=True,
    )
    if len(results) < 2 or not results[0] or not results[1]:
        return None

    root_path = Path(results[0])
    metadata_path = Path(results[1])

    info_lines, _ = await runner.run_lines(
        ["info"], program=program, cwd=path, suppress_stderr=True
    )

    return RepositoryInfo(
        root_path=root_path,
        metadata_path=metadata_path,
        detached=metadata_path != root_path / METADATA_DIR_NAME,
        branch=parse_branch(info_lines),
    )


async def find_username(runner: ArcCommandRunner, path: Path, program: str = "id") -> str:
    """Look up the login of the acting user.

    Returns:
        The login name, or an empty string when the lookup yields nothing.
    """
    info, _ = await runner.run_lines(["-un"], program=program, cwd=path, suppress_stderr=True)
    if not info:
        logger.warning(f"Can't find login in '{program} -un'")
        return ""
    return info[0]


class ArcRepository:
    """One working tree and its control directory.

    Shared by reference between every ArcFile in the same tree. Branch and
    user are resolved at creation and only re-resolved by refresh().
    """

    def __init__(
        self,
        runner: ArcCommandRunner,
        info: RepositoryInfo,
        username: str = "",
        id_program: str = "id",
    ) -> None:
        self.runner = runner
        self.root_path = info.root_path
        self.metadata_path = info.metadata_path
        self.detached = info.detached
        self.branch = info.branch
        self.username = username
        self.id_program = id_program

    @classmethod
    async def open(
        cls,
        runner: ArcCommandRunner,
        path: Path,
        id_program: str = "id",
    ) -> ArcRepository | None:
        """Create a handle for the tree containing ``path``.

        Returns:
            ArcRepository, or None when ``path`` is not in a working tree.
        """
        info = await resolve_repo_info(runner, path)
        if info is None:
            return None
        username = await find_username(runner, path, id_program)
        return cls(runner, info, username, id_program)

    def __repr__(self) -> str:
        return f"ArcRepository(root_path={str(self.root_path)!r}, branch={self.branch!r})"

    async def command_lines(
        self, args: list[str], **kwargs: Any
    ) -> tuple[list[str], str | None]:
        """Run a backend command rooted at the working tree."""
        return await self.runner.run_lines(args, cwd=self.root_path, **kwargs)

    async def command_raw_lines(
        self, args: list[str], **kwargs: Any
    ) -> tuple[list[bytes], str | None]:
        return await self.runner.run_raw_lines(args, cwd=self.root_path, **kwargs)

    async def command_structured(
        self, args: list[str], **kwargs: Any
    ) -> tuple[Any | None, str | None]:
        return await self.runner.run_structured(args, cwd=self.root_path, **kwargs)

    async def files_changed(self) -> list[str]:
        """List paths with unstaged modifications.

        Returns:
            Paths relative to the root, for status lines whose second status
            column is 'M'.
        """
        results, _ = await self.command_lines(["status", "--short"])
        return [line[3:] for line in results if len(line) >= 2 and line[1] == "M"]

    async def get_show_text(
        self, obj: str, encoding: str | None = None
    ) -> tuple[list[str], str | None]:
        """Get the content of a stored object as lines.

        Args:
            obj: Object spec, e.g. "HEAD:src/main.py".
            encoding: Declared encoding of the content.

        Returns:
            Tuple of (lines in the canonical encoding, stderr text or None).
        """
        raw, stderr = await self.command_raw_lines(
            ["show", "--git", obj], suppress_stderr=True
        )
        return normalize_lines(raw, encoding), stderr

    async def refresh(self) -> None:
        """Re-resolve branch, detached state and user."""
        info = await resolve_repo_info(self.runner, self.root_path)
        if info is not None:
            self.detached = info.detached
            self.branch = info.branch
        self.username = await find_username(self.runner, self.root_path, self.id_program)


class RepositoryCache:
    """Repository handles keyed by working tree root.

    Lets every file in one tree share a single ArcRepository.
    """

    def __init__(self, runner: ArcCommandRunner, id_program: str = "id") -> None:
        self.runner = runner
        self.id_program = id_program
        self._repos: dict[Path, ArcRepository] = {}

    def __len__(self) -> int:
        return len(self._repos)

    async def get(self, path: Path, root_path: Path | None = None) -> ArcRepository | None:
        """Return the handle for the tree containing ``path``.

        Args:
            path: Directory inside the tree.
            root_path: Already known tree root; when cached, no command runs.

        Returns:
            Shared ArcRepository, or None when ``path`` is not in a tree.
        """
        if root_path is not None and root_path in self._repos:
            return self._repos[root_path]

        info = await resolve_repo_info(self.runner, path)
        if info is None:
            return None
        repo = self._repos.get(info.root_path)
        if repo is None:
            username = await find_username(self.runner, path, self.id_program)
            repo = ArcRepository(self.runner, info, username, self.id_program)
            self._repos[info.root_path] = repo
        return repo
