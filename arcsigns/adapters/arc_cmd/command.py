"""Command dispatcher for the arc backend.

Runs backend commands through a ProcessInvoker and turns their output into
lines, raw byte lines or decoded JSON. Every call is independent: nothing is
queued or serialized, so callers touching shared index state must order their
own calls.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

from arcsigns.domain.entities import ArcVersion, ProcessOutput
from arcsigns.domain.exceptions import InvalidVersionError
from arcsigns.ports.process import ProcessInvoker

logger = logging.getLogger(__name__)

DEFAULT_PROGRAM = "arc"

# Number of output lines echoed at debug level
_PREVIEW_LINES = 10

_VERSION_RE = re.compile(r"arc version (\d+)")


def split_lines(text: str) -> list[str]:
    """Split command output into lines.

    A single trailing empty fragment left by a final newline is dropped, so
    empty output gives an empty list.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def split_raw_lines(data: bytes) -> list[bytes]:
    """Byte-level counterpart of split_lines."""
    lines = data.split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    return lines


def parse_version(version: str) -> ArcVersion:
    """Parse an 'arc version N' string.

    Raises:
        InvalidVersionError: If the string is not an arc version.
    """
    match = _VERSION_RE.search(version)
    if match is None:
        raise InvalidVersionError(
            f"Invalid arc version: {version}",
            hint="Set [backend] version to 'auto' or to 'arc version <N>'",
        )
    return ArcVersion(major=int(match.group(1)))


class ArcCommandRunner:
    """Builds and runs backend commands.

    Attributes:
        invoker: Process invoker used for every command.
        program: Default program name (the backend binary).
    """

    def __init__(self, invoker: ProcessInvoker, program: str = DEFAULT_PROGRAM) -> None:
        self.invoker = invoker
        self.program = program

    async def _run(
        self,
        args: list[str],
        program: str | None,
        cwd: Path | None,
        suppress_stderr: bool,
    ) -> tuple[ProcessOutput, str | None]:
        program = program or self.program
        output = await self.invoker.invoke(program, list(args), cwd)

        stderr = output.stderr.decode("utf-8", errors="replace") or None
        if stderr and not suppress_stderr:
            cmd_str = " ".join([program, *args])
            logger.error(f"Received stderr when running command\n'{cmd_str}':\n{stderr}")
        return output, stderr

    @staticmethod
    def _log_preview(lines: list[str]) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        logger.debug(f"{len(lines)} lines:")
        for line in lines[:_PREVIEW_LINES]:
            logger.debug(f"\t{line}")

    async def run_lines(
        self,
        args: list[str],
        *,
        program: str | None = None,
        cwd: Path | None = None,
        suppress_stderr: bool = False,
    ) -> tuple[list[str], str | None]:
        """Run a command and split its stdout into text lines.

        Args:
            args: Command arguments, without the program name.
            program: Program to run instead of the backend binary.
            cwd: Working directory. None means the caller's current directory.
            suppress_stderr: Do not log stderr even when present.

        Returns:
            Tuple of (stdout lines, stderr text or None).
        """
        output, stderr = await self._run(args, program, cwd, suppress_stderr)
        lines = split_lines(output.stdout.decode("utf-8", errors="replace"))
        self._log_preview(lines)
        return lines, stderr

    async def run_raw_lines(
        self,
        args: list[str],
        *,
        program: str | None = None,
        cwd: Path | None = None,
        suppress_stderr: bool = False,
    ) -> tuple[list[bytes], str | None]:
        """Run a command and split its stdout into undecoded lines.

        Used for file content, which must be transcoded by the caller.
        """
        output, stderr = await self._run(args, program, cwd, suppress_stderr)
        return split_raw_lines(output.stdout), stderr

    async def run_structured(
        self,
        args: list[str],
        *,
        program: str | None = None,
        cwd: Path | None = None,
        suppress_stderr: bool = False,
    ) -> tuple[Any | None, str | None]:
        """Run a command and decode its stdout as JSON.

        Returns:
            Tuple of (decoded value, stderr text or None). The value is None
            when stdout is empty or not valid JSON.
        """
        output, stderr = await self._run(args, program, cwd, suppress_stderr)
        if not output.stdout.strip():
            return None, stderr
        try:
            return json.loads(output.stdout), stderr
        except json.JSONDecodeError as e:
            logger.debug(f"Could not decode JSON from '{' '.join(args)}': {e}")
            return None, stderr

    async def version(self) -> ArcVersion:
        """Query the backend binary for its version.

        Raises:
            InvalidVersionError: If the output is not an arc version line.
        """
        lines, _ = await self.run_lines(["--version"])
        line = lines[0] if lines else ""
        if not line.startswith("arc version"):
            raise InvalidVersionError(f"Unexpected output: {line}")
        return parse_version(line)


async def detect_version(runner: ArcCommandRunner, configured: str = "auto") -> ArcVersion:
    """Resolve the backend version.

    Args:
        runner: Runner used when the version must be queried.
        configured: Configured version string, or "auto" to ask the binary.

    Returns:
        Parsed ArcVersion. Callers hold on to the value themselves.

    Raises:
        InvalidVersionError: If the version cannot be parsed.
    """
    if configured != "auto":
        return parse_version(configured)
    return await runner.version()


async def run_diff(
    runner: ArcCommandRunner,
    file_cmp: Path | str,
    file_buf: Path | str,
    indent_heuristic: bool = False,
    diff_algorithm: str = "myers",
) -> tuple[list[str], str | None]:
    """Diff two files on disk with zero context lines.

    Returns:
        Tuple of (diff output lines, stderr text or None).
    """
    return await runner.run_lines(
        [
            "-c",
            "core.safecrlf=false",
            "diff",
            "--color=never",
            f"--{'' if indent_heuristic else 'no-'}indent-heuristic",
            f"--diff-algorithm={diff_algorithm}",
            "--patch-with-raw",
            "--unified=0",
            str(file_cmp),
            str(file_buf),
        ]
    )
