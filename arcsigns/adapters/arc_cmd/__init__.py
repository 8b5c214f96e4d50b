"""arc backend adapter: command dispatch, repository and file handles."""

from arcsigns.adapters.arc_cmd.blame import interpret_blame, iso8601_to_timestamp
from arcsigns.adapters.arc_cmd.command import (
    ArcCommandRunner,
    detect_version,
    parse_version,
    run_diff,
    split_lines,
)
from arcsigns.adapters.arc_cmd.file import ArcFile
from arcsigns.adapters.arc_cmd.repository import (
    ArcRepository,
    RepositoryCache,
    find_username,
    resolve_repo_info,
)

__all__ = [
    "ArcCommandRunner",
    "ArcFile",
    "ArcRepository",
    "RepositoryCache",
    "detect_version",
    "find_username",
    "interpret_blame",
    "iso8601_to_timestamp",
    "parse_version",
    "resolve_repo_info",
    "run_diff",
    "split_lines",
]
