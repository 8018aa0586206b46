"""
Module: status.py
Description: Submission status store with automatic expiry.

Records the final delivery outcome of each submission under the key
``submission_status:<id>`` for a bounded retention window. Records are
written only by the delivery worker. A missing record means either
"never processed" or "expired", never "failed".

Key Components:
- StatusStore: Store contract (set_status / get_status)
- DynamoDBStatusStore: DynamoDB table with a native TTL attribute
- InMemoryStatusStore: Process-local store for development and tests

Dependencies: boto3, botocore, datetime, typing
Author: FormRelay Team
"""

import math
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Tuple

import boto3
from botocore.exceptions import ClientError

from formrelay.utils.logger import get_logger

logger = get_logger(__name__)

STATUS_KEY_PREFIX = "submission_status:"

Clock = Callable[[], float]


def status_key(submission_id: str) -> str:
    """Build the status record key for a submission."""
    return f"{STATUS_KEY_PREFIX}{submission_id}"


class StatusStore(ABC):
    """Key/value store of delivery outcomes with per-record expiry."""

    @abstractmethod
    async def set_status(self, submission_id: str, status: str, ttl: timedelta) -> None:
        """
        Record the status of a submission.

        Args:
            submission_id: Submission identifier
            status: Status string
            ttl: Retention window after which the record disappears
        """

    @abstractmethod
    async def get_status(self, submission_id: str) -> Optional[str]:
        """
        Look up the status of a submission.

        Returns:
            Status string, or None if never written or expired
        """


def _validate(submission_id: str, status: Optional[str] = None, ttl: Optional[timedelta] = None) -> None:
    if not submission_id or not isinstance(submission_id, str):
        raise ValueError("submission_id must be a non-empty string")
    if status is not None and (not status or not isinstance(status, str)):
        raise ValueError("status must be a non-empty string")
    if ttl is not None and ttl.total_seconds() <= 0:
        raise ValueError("ttl must be positive")


class DynamoDBStatusStore(StatusStore):
    """
    DynamoDB status store.

    Each record is one item keyed by ``status_key``. ``expires_at`` holds
    the expiry as epoch seconds and should be configured as the table's
    TTL attribute. DynamoDB deletes expired items lazily, so reads also
    compare ``expires_at`` against the clock.

    Attributes:
        table_name: Name of the DynamoDB status table
        dynamodb: boto3 DynamoDB resource
        table: boto3 DynamoDB table resource

    Example:
        >>> store = DynamoDBStatusStore(table_name="formrelay-status")
        >>> await store.set_status("3f2a...", "completed", timedelta(hours=24))
        >>> await store.get_status("3f2a...")
        'completed'
    """

    def __init__(self, table_name: str, clock: Clock = time.time, region_name: Optional[str] = None):
        """
        Initialize DynamoDB status store.

        Args:
            table_name: Name of the DynamoDB status table
            clock: Returns the current time as epoch seconds
            region_name: AWS region of the table

        Raises:
            ValueError: If table_name is empty or invalid
        """
        if not table_name or not isinstance(table_name, str):
            raise ValueError("table_name must be a non-empty string")

        self.table_name = table_name
        self.clock = clock
        self.dynamodb = boto3.resource('dynamodb', region_name=region_name)
        self.table = self.dynamodb.Table(table_name)

        logger.info(
            "DynamoDB status store initialized",
            table_name=table_name
        )

    async def set_status(self, submission_id: str, status: str, ttl: timedelta) -> None:
        """
        Write the status record, replacing any previous one.

        Raises:
            ClientError: If DynamoDB operation fails
            ValueError: If arguments are invalid
        """
        _validate(submission_id, status, ttl)

        now = self.clock()
        item = {
            'status_key': status_key(submission_id),
            'submission_id': submission_id,
            'status': status,
            'updated_at': datetime.fromtimestamp(now, tz=timezone.utc).isoformat(),
            'expires_at': math.ceil(now + ttl.total_seconds()),
        }

        try:
            self.table.put_item(Item=item)

        except ClientError as e:
            logger.error(
                "Failed to store submission status",
                submission_id=submission_id,
                status=status,
                table_name=self.table_name,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise

        logger.info(
            "Submission status stored",
            submission_id=submission_id,
            status=status,
            expires_at=item['expires_at']
        )

    async def get_status(self, submission_id: str) -> Optional[str]:
        """
        Read the status record.

        Raises:
            ClientError: If DynamoDB operation fails
            ValueError: If submission_id is invalid
        """
        _validate(submission_id)

        try:
            response = self.table.get_item(Key={'status_key': status_key(submission_id)})

        except ClientError as e:
            logger.error(
                "Failed to read submission status",
                submission_id=submission_id,
                table_name=self.table_name,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise

        item = response.get('Item')
        if not item:
            return None

        if int(item.get('expires_at', 0)) <= self.clock():
            logger.debug(
                "Submission status expired",
                submission_id=submission_id
            )
            return None

        return item['status']


class InMemoryStatusStore(StatusStore):
    """Process-local status store; records vanish on restart."""

    def __init__(self, clock: Clock = time.monotonic):
        self.clock = clock
        self._records: Dict[str, Tuple[str, float]] = {}

    async def set_status(self, submission_id: str, status: str, ttl: timedelta) -> None:
        _validate(submission_id, status, ttl)
        self._records[status_key(submission_id)] = (status, self.clock() + ttl.total_seconds())
        logger.info("Submission status stored", submission_id=submission_id, status=status)

    async def get_status(self, submission_id: str) -> Optional[str]:
        _validate(submission_id)
        key = status_key(submission_id)
        record = self._records.get(key)
        if record is None:
            return None

        status, expires_at = record
        if expires_at <= self.clock():
            del self._records[key]
            return None
        return status
