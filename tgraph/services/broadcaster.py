"""Fan-out of dashboard payloads to SSE subscribers."""

import asyncio
import logging
from typing import Set

from tgraph.monitoring.metrics import sse_subscribers

logger = logging.getLogger(__name__)

# Sentinel pushed to subscriber queues when the broadcaster closes.
CLOSED = None


class Broadcaster:
    """Deliver serialized payloads to every connected subscriber queue."""

    def __init__(self, queue_size: int = 16) -> None:
        """
        Initialize the broadcaster.

        Args:
            queue_size: Pending messages kept per subscriber; older pending
                messages are dropped for slow subscribers.
        """
        self.queue_size = queue_size
        self._subscribers: Set[asyncio.Queue] = set()
        self.closed = False

    def subscribe(self) -> asyncio.Queue:
        """Register a new subscriber and return its queue."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        if self.closed:
            queue.put_nowait(CLOSED)
            return queue
        self._subscribers.add(queue)
        sse_subscribers.set(len(self._subscribers))
        logger.info(f"SSE subscriber connected ({len(self._subscribers)} total)")
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.discard(queue)
            sse_subscribers.set(len(self._subscribers))
            logger.info(f"SSE subscriber disconnected ({len(self._subscribers)} total)")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, message: str) -> int:
        """
        Push a message to every subscriber without blocking.

        Args:
            message: Serialized payload.

        Returns:
            Number of subscribers the message was queued for.
        """
        delivered = 0
        for queue in list(self._subscribers):
            if queue.full():
                # Drop the oldest pending update; only the latest state matters.
                queue.get_nowait()
            queue.put_nowait(message)
            delivered += 1
        return delivered

    def close(self) -> None:
        """Signal every subscriber to end its stream."""
        self.closed = True
        for queue in list(self._subscribers):
            self._put_sentinel(queue)
        self._subscribers.clear()
        sse_subscribers.set(0)

    @staticmethod
    def _put_sentinel(queue: asyncio.Queue) -> None:
        while True:
            try:
                queue.put_nowait(CLOSED)
                return
            except asyncio.QueueFull:
                queue.get_nowait()


def format_sse(data: str) -> str:
    """Format one server-sent event frame."""
    return f"data: {data}\n\n"
