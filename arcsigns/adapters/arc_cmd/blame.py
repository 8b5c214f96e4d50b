"""Interpretation of 'arc blame --json' reports.

The report has two tables: ``annotation``, one entry per line in file order,
and ``commits``, the commits those entries point at::

    {
      "annotation": [{"commit": "...", "line": 3, "author": "...",
                      "date": "2023-05-01T10:00:00+03:00", "label": "..."}],
      "commits": [{"commit": "...", "path": "...", "parents": ["..."],
                   "revision": 123, "message": "..."}]
    }
"""

import logging
import re
from calendar import timegm
from collections.abc import Mapping
from typing import Any

from arcsigns.domain.entities import BlameRecord

logger = logging.getLogger(__name__)

ABBREV_LENGTH = 8

# Labels marking lines that are not part of history yet
UNCOMMITTED_LABELS = frozenset({"staged", "unstaged"})

_ISO8601_RE = re.compile(
    r"(\d+)-(\d+)-(\d+)T(\d+):(\d+):(\d+)(?:\.\d+)?"
    r"(?:(Z)|([+-])(\d{2}):?(\d{2}))?$"
)


def iso8601_to_timestamp(iso_date: str) -> int | None:
    """Convert 'YYYY-MM-DDTHH:MM:SS+HH:MM' to epoch seconds.

    The calendar fields are taken as UTC and the signed offset subtracted.
    Fractional seconds are dropped; a missing offset means UTC.

    Returns:
        Epoch seconds, or None if the string is not in that form.
    """
    match = _ISO8601_RE.match(iso_date.strip())
    if match is None:
        return None
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    _, sign, tz_hour, tz_min = match.groups()[6:]

    offset = 0
    if sign:
        offset = int(tz_hour) * 3600 + int(tz_min) * 60
        if sign == "-":
            offset = -offset

    return timegm((year, month, day, hour, minute, second, 0, 0, 0)) - offset


def first_non_empty_line(text: str) -> str:
    """Return the first line that is not blank, or an empty string."""
    for line in text.splitlines():
        if line.strip():
            return line
    return ""


def _find_commit(commits: Any, commit_id: str) -> Mapping[str, Any] | None:
    if not isinstance(commits, list):
        return None
    for commit in commits:
        if isinstance(commit, Mapping) and commit.get("commit") == commit_id:
            return commit
    return None


def interpret_blame(report: Any, line_number: int) -> BlameRecord:
    """Build the blame record for one line of a decoded report.

    Args:
        report: Decoded JSON report, or None if the query gave nothing usable.
        line_number: 1-based line number.

    Returns:
        BlameRecord for the line, or the not-committed sentinel when the line
        has no resolvable commit.
    """
    if not isinstance(report, Mapping):
        return BlameRecord.not_committed()

    annotation = report.get("annotation")
    if not isinstance(annotation, list):
        return BlameRecord.not_committed()

    if not 1 <= line_number <= len(annotation):
        return BlameRecord.not_committed()

    current_line = annotation[line_number - 1]
    if not isinstance(current_line, Mapping):
        return BlameRecord.not_committed()

    label = current_line.get("label")
    if isinstance(label, str) and label in UNCOMMITTED_LABELS:
        return BlameRecord.not_committed()

    commit_id = current_line.get("commit")
    if not isinstance(commit_id, str) or not commit_id:
        return BlameRecord.not_committed()

    commit = _find_commit(report.get("commits"), commit_id)
    if not commit:
        return BlameRecord.not_committed()

    author = current_line.get("author") or ""

    author_time = None
    date = current_line.get("date")
    if isinstance(date, str):
        author_time = iso8601_to_timestamp(date)
        if author_time is None:
            logger.warning(f"Unrecognised blame date '{date}' for commit {commit_id}")

    previous_commit_id = None
    previous_path = None
    parents = commit.get("parents")
    if isinstance(parents, list) and parents:
        previous_commit_id = parents[0]
        previous_path = commit.get("path")

    return BlameRecord(
        commit_id=commit_id,
        abbreviated_commit_id=commit_id[:ABBREV_LENGTH],
        author=author,
        author_contact=author,
        author_time=author_time,
        summary=first_non_empty_line(commit.get("message") or ""),
        original_line_number=current_line.get("line"),
        final_line_number=line_number,
        previous_commit_id=previous_commit_id,
        previous_path=previous_path,
        path=commit.get("path"),
        revision=commit.get("revision"),
    )
