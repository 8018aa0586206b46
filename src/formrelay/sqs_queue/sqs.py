"""
Module: sqs.py
Description: SQS-backed submission queue.

Stores queued submissions in an Amazon SQS queue so that entries
survive restarts of both the API and the worker. With a FIFO queue
every entry shares one message group, which gives strict ordering on
the single submission channel; receives are long-polled so an empty
queue never produces a busy loop.
"""

import hashlib
from typing import Optional

from aioboto3 import Session
from botocore.exceptions import BotoCoreError, ClientError

from formrelay.sqs_queue.base import QueuedMessage, QueueError, SubmissionQueue
from formrelay.utils.logger import get_logger

logger = get_logger(__name__)


class SQSSubmissionQueue(SubmissionQueue):
    """
    SQS client for submission queue operations.

    Entries are acknowledged by deleting them after processing; an entry
    whose consumer dies before acknowledging becomes visible again once
    the visibility timeout elapses.
    """

    def __init__(
        self,
        queue_url: str,
        topic: str = "form_submissions",
        wait_seconds: int = 20,
        visibility_timeout: int = 120,
        region_name: Optional[str] = None,
        session: Optional[Session] = None
    ):
        """
        Initialize SQS queue client.

        Args:
            queue_url: URL of the SQS queue
            topic: Message group of the single ordered channel
            wait_seconds: Long-poll wait per receive call
            visibility_timeout: Seconds a received entry stays hidden
            region_name: AWS region of the queue
            session: aioboto3 session (created if not given)

        Raises:
            ValueError: If queue_url or topic is invalid
        """
        if not queue_url or not isinstance(queue_url, str):
            raise ValueError("queue_url must be a non-empty string")
        if not topic or not isinstance(topic, str):
            raise ValueError("topic must be a non-empty string")

        self.queue_url = queue_url
        self.topic = topic
        self.wait_seconds = wait_seconds
        self.visibility_timeout = visibility_timeout
        self.region_name = region_name
        self.is_fifo = queue_url.endswith(".fifo")
        self.session = session or Session()

        logger.info(
            "SQS submission queue initialized",
            queue_url=queue_url,
            topic=topic,
            fifo=self.is_fifo
        )

    def _client(self):
        return self.session.client('sqs', region_name=self.region_name)

    async def enqueue(self, body: bytes, message_id: Optional[str] = None) -> None:
        """
        Send a serialized submission to the queue.

        Args:
            body: Serialized submission
            message_id: Submission id, used as FIFO deduplication id

        Raises:
            QueueError: If the SQS operation fails
        """
        if not body or not isinstance(body, bytes):
            raise ValueError("body must be non-empty bytes")

        params = {
            'QueueUrl': self.queue_url,
            'MessageBody': body.decode('utf-8'),
        }
        if self.is_fifo:
            params['MessageGroupId'] = self.topic
            params['MessageDeduplicationId'] = message_id or hashlib.sha256(body).hexdigest()

        try:
            async with self._client() as sqs:
                response = await sqs.send_message(**params)

        except ClientError as e:
            logger.error(
                "Failed to send submission to SQS",
                message_id=message_id,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise QueueError(f"Failed to enqueue submission: {e}") from e

        except BotoCoreError as e:
            logger.error(
                "SQS unreachable while enqueueing",
                message_id=message_id,
                error=str(e)
            )
            raise QueueError(f"Failed to enqueue submission: {e}") from e

        logger.info(
            "Submission sent to SQS",
            message_id=message_id,
            sqs_message_id=response.get('MessageId'),
            queue_url=self.queue_url
        )

    async def dequeue(self) -> QueuedMessage:
        """
        Long-poll SQS until one entry is received.

        Returns:
            The oldest available entry with its receipt handle

        Raises:
            QueueError: If the SQS operation fails
        """
        try:
            async with self._client() as sqs:
                while True:
                    response = await sqs.receive_message(
                        QueueUrl=self.queue_url,
                        MaxNumberOfMessages=1,
                        WaitTimeSeconds=self.wait_seconds,
                        VisibilityTimeout=self.visibility_timeout
                    )
                    messages = response.get('Messages') or []
                    if messages:
                        message = messages[0]
                        logger.debug(
                            "Entry received from SQS",
                            sqs_message_id=message.get('MessageId')
                        )
                        return QueuedMessage(
                            body=message['Body'].encode('utf-8'),
                            receipt=message['ReceiptHandle']
                        )

        except ClientError as e:
            logger.error(
                "Failed to receive from SQS",
                queue_url=self.queue_url,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise QueueError(f"Failed to dequeue submission: {e}") from e

        except BotoCoreError as e:
            logger.error(
                "SQS unreachable while receiving",
                queue_url=self.queue_url,
                error=str(e)
            )
            raise QueueError(f"Failed to dequeue submission: {e}") from e

    async def ack(self, message: QueuedMessage) -> None:
        """
        Delete a processed entry from the queue.

        Raises:
            QueueError: If the SQS operation fails
        """
        if not message.receipt:
            raise ValueError("message has no receipt handle")

        try:
            async with self._client() as sqs:
                await sqs.delete_message(
                    QueueUrl=self.queue_url,
                    ReceiptHandle=message.receipt
                )

        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to delete entry from SQS",
                queue_url=self.queue_url,
                error=str(e)
            )
            raise QueueError(f"Failed to acknowledge entry: {e}") from e
