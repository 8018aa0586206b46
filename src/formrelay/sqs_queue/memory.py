"""
Module: memory.py
Description: In-process submission queue for local development and tests.

Entries live only in process memory and are lost on restart, so this
backend is only suitable when the worker runs inside the API process.
"""

import asyncio
from typing import Optional

from formrelay.sqs_queue.base import QueuedMessage, SubmissionQueue
from formrelay.utils.logger import get_logger

logger = get_logger(__name__)


class InMemorySubmissionQueue(SubmissionQueue):
    """Unbounded FIFO queue backed by asyncio.Queue."""

    def __init__(self, topic: str = "form_submissions"):
        self.topic = topic
        self._queue: "asyncio.Queue[bytes]" = asyncio.Queue()

        logger.warning(
            "Using in-memory submission queue; entries do not survive restarts",
            topic=topic
        )

    async def enqueue(self, body: bytes, message_id: Optional[str] = None) -> None:
        if not body or not isinstance(body, bytes):
            raise ValueError("body must be non-empty bytes")
        self._queue.put_nowait(body)
        logger.debug("Entry queued in memory", message_id=message_id, depth=self._queue.qsize())

    async def dequeue(self) -> QueuedMessage:
        body = await self._queue.get()
        self._queue.task_done()
        return QueuedMessage(body=body)

    async def ack(self, message: QueuedMessage) -> None:
        # Entries are removed on dequeue
        return None

    def qsize(self) -> int:
        """Number of entries waiting."""
        return self._queue.qsize()
