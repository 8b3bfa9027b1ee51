"""Dependency container for the web dashboard services."""

import asyncio
import logging
from typing import Optional

from tgraph.core.config import settings
from tgraph.services.broadcaster import Broadcaster
from tgraph.services.session import ViewerConfig, WebViewerSession

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Container for the web session, its broadcaster and the tail task."""

    def __init__(
        self,
        config: Optional[ViewerConfig] = None,
        tail_interval_ms: Optional[int] = None,
    ) -> None:
        """
        Initialize service container.

        Args:
            config: Viewer configuration; built from settings if omitted.
            tail_interval_ms: Delay between polls of the source file.
        """
        self.config = config or ViewerConfig.from_settings(settings)
        self.tail_interval = (tail_interval_ms or settings.tail_interval_ms) / 1000
        self.session = WebViewerSession(self.config)
        self.broadcaster = Broadcaster()
        self._task: Optional[asyncio.Task] = None

    async def initialize(self) -> None:
        """Load history and start tailing the source file."""
        self.session.start()
        self._task = asyncio.create_task(self.tail_source())

    async def tail_source(self) -> None:
        """Poll the source file and push updates to subscribers."""
        logger.info(f"Tailing {self.config.log_file} every {self.tail_interval:.3f}s")
        while self.session.is_live:
            if self.session.poll():
                self.broadcast()
            await asyncio.sleep(self.tail_interval)

    def broadcast(self) -> int:
        """
        Push the current payload to every SSE subscriber.

        Returns:
            Number of subscribers notified.
        """
        if not self.broadcaster.subscriber_count:
            return 0
        return self.broadcaster.publish(self.session.payload().model_dump_json())

    async def shutdown(self) -> None:
        """Stop tailing, close subscriber streams and stop the session."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self.broadcaster.close()
        self.session.stop()
