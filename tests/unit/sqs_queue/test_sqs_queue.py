"""
Module: test_sqs_queue.py
Description: Unit tests for the SQS submission queue.

Uses a mocked aioboto3 session to verify the SQS calls made for
enqueue, long-polled dequeue and acknowledgement, and the mapping of
botocore errors to QueueError.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from formrelay.sqs_queue.base import QueuedMessage, QueueError
from formrelay.sqs_queue.sqs import SQSSubmissionQueue

FIFO_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/form-submissions.fifo"
STANDARD_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/form-submissions"


def make_session(sqs_client):
    """Build a session whose client() context manager yields sqs_client."""
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=sqs_client)
    context.__aexit__ = AsyncMock(return_value=False)
    session = MagicMock()
    session.client.return_value = context
    return session


def client_error(operation):
    return ClientError(
        error_response={'Error': {'Code': 'AWS.SimpleQueueService.NonExistentQueue', 'Message': 'Test error'}},
        operation_name=operation
    )


class TestSQSSubmissionQueue:
    """Test cases for SQSSubmissionQueue."""

    def test_initialization_invalid_url(self):
        with pytest.raises(ValueError, match="queue_url must be a non-empty string"):
            SQSSubmissionQueue(queue_url="", session=MagicMock())

    def test_fifo_detection(self):
        assert SQSSubmissionQueue(FIFO_URL, session=MagicMock()).is_fifo
        assert not SQSSubmissionQueue(STANDARD_URL, session=MagicMock()).is_fifo

    @pytest.mark.asyncio
    async def test_enqueue_fifo_uses_single_message_group(self):
        sqs = MagicMock()
        sqs.send_message = AsyncMock(return_value={'MessageId': 'm-1'})
        queue = SQSSubmissionQueue(FIFO_URL, topic="form_submissions", session=make_session(sqs))

        await queue.enqueue(b'{"id": "abc"}', message_id="abc")

        sqs.send_message.assert_awaited_once_with(
            QueueUrl=FIFO_URL,
            MessageBody='{"id": "abc"}',
            MessageGroupId="form_submissions",
            MessageDeduplicationId="abc"
        )

    @pytest.mark.asyncio
    async def test_enqueue_standard_queue_has_no_group(self):
        sqs = MagicMock()
        sqs.send_message = AsyncMock(return_value={'MessageId': 'm-1'})
        queue = SQSSubmissionQueue(STANDARD_URL, session=make_session(sqs))

        await queue.enqueue(b'{"id": "abc"}', message_id="abc")

        kwargs = sqs.send_message.await_args.kwargs
        assert 'MessageGroupId' not in kwargs
        assert 'MessageDeduplicationId' not in kwargs

    @pytest.mark.asyncio
    async def test_enqueue_client_error_raises_queue_error(self):
        sqs = MagicMock()
        sqs.send_message = AsyncMock(side_effect=client_error('SendMessage'))
        queue = SQSSubmissionQueue(FIFO_URL, session=make_session(sqs))

        with pytest.raises(QueueError):
            await queue.enqueue(b'{"id": "abc"}', message_id="abc")

    @pytest.mark.asyncio
    async def test_enqueue_unreachable_raises_queue_error(self):
        sqs = MagicMock()
        sqs.send_message = AsyncMock(side_effect=EndpointConnectionError(endpoint_url=FIFO_URL))
        queue = SQSSubmissionQueue(FIFO_URL, session=make_session(sqs))

        with pytest.raises(QueueError):
            await queue.enqueue(b'{"id": "abc"}', message_id="abc")

    @pytest.mark.asyncio
    async def test_dequeue_polls_until_message(self):
        sqs = MagicMock()
        sqs.receive_message = AsyncMock(side_effect=[
            {},
            {'Messages': []},
            {'Messages': [{'MessageId': 'm-1', 'Body': '{"id": "abc"}', 'ReceiptHandle': 'rh-1'}]},
        ])
        queue = SQSSubmissionQueue(
            FIFO_URL,
            wait_seconds=20,
            visibility_timeout=90,
            session=make_session(sqs)
        )

        message = await queue.dequeue()

        assert message == QueuedMessage(body=b'{"id": "abc"}', receipt='rh-1')
        assert sqs.receive_message.await_count == 3
        sqs.receive_message.assert_awaited_with(
            QueueUrl=FIFO_URL,
            MaxNumberOfMessages=1,
            WaitTimeSeconds=20,
            VisibilityTimeout=90
        )

    @pytest.mark.asyncio
    async def test_dequeue_client_error_raises_queue_error(self):
        sqs = MagicMock()
        sqs.receive_message = AsyncMock(side_effect=client_error('ReceiveMessage'))
        queue = SQSSubmissionQueue(FIFO_URL, session=make_session(sqs))

        with pytest.raises(QueueError):
            await queue.dequeue()

    @pytest.mark.asyncio
    async def test_ack_deletes_message(self):
        sqs = MagicMock()
        sqs.delete_message = AsyncMock(return_value={})
        queue = SQSSubmissionQueue(FIFO_URL, session=make_session(sqs))

        await queue.ack(QueuedMessage(body=b'{}', receipt='rh-1'))

        sqs.delete_message.assert_awaited_once_with(QueueUrl=FIFO_URL, ReceiptHandle='rh-1')

    @pytest.mark.asyncio
    async def test_ack_without_receipt(self):
        queue = SQSSubmissionQueue(FIFO_URL, session=MagicMock())

        with pytest.raises(ValueError, match="receipt handle"):
            await queue.ack(QueuedMessage(body=b'{}'))
