"""ProcessInvoker implementation on asyncio subprocesses."""

import asyncio
import logging
from pathlib import Path

from arcsigns.domain.entities import ProcessOutput

logger = logging.getLogger(__name__)

# Conventional shell exit status for "command not found"
NOT_FOUND_RETURNCODE = 127
TIMEOUT_RETURNCODE = -1


class AsyncioProcessInvoker:
    """Run programs with asyncio.create_subprocess_exec.

    Each call spawns an independent process; nothing is queued, so any number
    of invocations may be in flight at once.
    """

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize invoker.

        Args:
            timeout: Seconds to wait before killing a process. None waits forever.
        """
        self.timeout = timeout

    async def invoke(
        self,
        program: str,
        args: list[str],
        cwd: Path | None = None,
    ) -> ProcessOutput:
        """Run a program and capture its output.

        Args:
            program: Executable name or path.
            args: Arguments, without the program name.
            cwd: Working directory. None means the caller's current directory.

        Returns:
            ProcessOutput. A program that cannot be started yields exit status
            127 with the OS error on stderr; a timeout yields exit status -1.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                program,
                *args,
                cwd=str(cwd) if cwd is not None else None,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.debug(f"Failed to start {program}: {e}")
            return ProcessOutput(
                stdout=b"",
                stderr=f"{program}: {e.strerror or e}\n".encode(),
                returncode=NOT_FOUND_RETURNCODE,
            )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except TimeoutError:
            process.kill()
            await process.wait()
            logger.warning(f"Command '{program}' timed out after {self.timeout}s")
            return ProcessOutput(
                stdout=b"",
                stderr=f"{program}: timed out after {self.timeout}s\n".encode(),
                returncode=TIMEOUT_RETURNCODE,
            )

        return ProcessOutput(
            stdout=stdout,
            stderr=stderr,
            returncode=process.returncode if process.returncode is not None else 0,
        )
