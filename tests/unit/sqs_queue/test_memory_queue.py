"""
Module: test_memory_queue.py
Description: Unit tests for the in-memory submission queue.

Covers FIFO ordering, blocking dequeue and single delivery of entries.
"""

import asyncio

import pytest

from formrelay.sqs_queue.base import QueuedMessage


class TestInMemorySubmissionQueue:
    """Test cases for InMemorySubmissionQueue."""

    @pytest.mark.asyncio
    async def test_fifo_order(self, memory_queue):
        for i in range(5):
            await memory_queue.enqueue(f"entry-{i}".encode())

        received = [(await memory_queue.dequeue()).body for _ in range(5)]

        assert received == [f"entry-{i}".encode() for i in range(5)]

    @pytest.mark.asyncio
    async def test_each_entry_dequeued_once(self, memory_queue):
        await memory_queue.enqueue(b"only")

        message = await memory_queue.dequeue()
        await memory_queue.ack(message)

        assert message == QueuedMessage(body=b"only")
        assert memory_queue.qsize() == 0
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(memory_queue.dequeue(), 0.05)

    @pytest.mark.asyncio
    async def test_dequeue_blocks_until_entry_arrives(self, memory_queue):
        pending = asyncio.ensure_future(memory_queue.dequeue())
        await asyncio.sleep(0.01)

        assert not pending.done()

        await memory_queue.enqueue(b"late")
        message = await asyncio.wait_for(pending, 1.0)

        assert message.body == b"late"

    @pytest.mark.asyncio
    async def test_enqueue_rejects_empty_body(self, memory_queue):
        with pytest.raises(ValueError, match="non-empty bytes"):
            await memory_queue.enqueue(b"")
