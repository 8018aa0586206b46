"""
Module: base.py
Description: Submission queue contract.

Defines the interface shared by all queue backends. A queue is a
single ordered channel: entries are delivered to the consumer in the
order they were enqueued, dequeue blocks until an entry is available,
and an entry is only removed for good once the consumer acknowledges it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


class QueueError(Exception):
    """Raised when the queue backend cannot enqueue, dequeue or acknowledge."""


@dataclass(frozen=True)
class QueuedMessage:
    """
    An entry received from the queue.

    Attributes:
        body: Serialized submission bytes, exactly as enqueued
        receipt: Backend acknowledgement token (None for backends without one)
    """

    body: bytes
    receipt: Optional[str] = None


class SubmissionQueue(ABC):
    """Abstract FIFO queue of serialized submissions."""

    @abstractmethod
    async def enqueue(self, body: bytes, message_id: Optional[str] = None) -> None:
        """
        Append an entry to the end of the queue.

        Args:
            body: Serialized submission
            message_id: Unique id of the entry, used for backend deduplication

        Raises:
            QueueError: If the backend rejects the entry
        """

    @abstractmethod
    async def dequeue(self) -> QueuedMessage:
        """
        Wait for and return the oldest entry.

        Never returns an empty result; suspends until an entry exists.

        Raises:
            QueueError: If the backend cannot be polled
        """

    @abstractmethod
    async def ack(self, message: QueuedMessage) -> None:
        """
        Mark a received entry as consumed.

        Raises:
            QueueError: If the backend cannot remove the entry
        """

    async def close(self) -> None:
        """Release backend resources."""
