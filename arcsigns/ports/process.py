"""Process invocation port.

The core never spawns processes itself; it awaits an implementation of this
protocol to run a program and collect its output.
"""

from pathlib import Path
from typing import Protocol

from arcsigns.domain.entities import ProcessOutput


class ProcessInvoker(Protocol):
    """Protocol for running external programs asynchronously."""

    async def invoke(
        self,
        program: str,
        args: list[str],
        cwd: Path | None = None,
    ) -> ProcessOutput:
        """Run a program to completion and capture its output.

        Args:
            program: Executable name or path.
            args: Arguments, without the program name.
            cwd: Working directory. None means the caller's current directory.

        Returns:
            ProcessOutput with full stdout, stderr and exit status. Failure
            to start the program is reported through the output, not raised.
        """
        ...
