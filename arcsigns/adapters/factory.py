"""Factory for wiring the command layer from configuration.

Keeps the CLI free from direct adapter construction: it asks the factory for
a file handle and gets one backed by the configured invoker, runner and a
shared repository cache.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from arcsigns.adapters.arc_cmd.command import ArcCommandRunner, detect_version
from arcsigns.adapters.arc_cmd.file import ArcFile
from arcsigns.adapters.arc_cmd.repository import RepositoryCache
from arcsigns.adapters.messages.click_sink import ClickMessageSink
from arcsigns.adapters.process.asyncio_invoker import AsyncioProcessInvoker

if TYPE_CHECKING:
    from arcsigns.domain.config import ArcsignsConfig
    from arcsigns.domain.entities import ArcVersion
    from arcsigns.ports.messages import MessageSink
    from arcsigns.ports.process import ProcessInvoker


class ArcsignsFactory:
    """Creates runners, repository handles and file handles.

    Args:
        config: Configuration with backend settings.
        invoker: Process invoker; defaults to an asyncio invoker honouring
            the configured timeout.
        messages: Sink for user-visible notices.
    """

    def __init__(
        self,
        config: ArcsignsConfig,
        invoker: ProcessInvoker | None = None,
        messages: MessageSink | None = None,
    ) -> None:
        self._config = config
        self._invoker = invoker or AsyncioProcessInvoker(config.backend.command_timeout)
        self._messages = messages or ClickMessageSink()
        self._runner: ArcCommandRunner | None = None
        self._cache: RepositoryCache | None = None

    @property
    def runner(self) -> ArcCommandRunner:
        if self._runner is None:
            self._runner = ArcCommandRunner(self._invoker, self._config.backend.binary)
        return self._runner

    @property
    def cache(self) -> RepositoryCache:
        if self._cache is None:
            self._cache = RepositoryCache(self.runner, self._config.backend.id_program)
        return self._cache

    async def open_file(self, path: Path, encoding: str = "utf-8") -> ArcFile | None:
        """Open a file handle, sharing repository handles across calls."""
        return await ArcFile.open(
            path.resolve(),
            encoding,
            runner=self.runner,
            cache=self.cache,
            messages=self._messages,
            hash_program=self._config.backend.hash_program,
        )

    async def detect_version(self) -> ArcVersion:
        """Resolve the backend version from config or the binary."""
        return await detect_version(self.runner, self._config.backend.version)
