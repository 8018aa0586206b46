"""
Module: backends.py
Description: Construction of the queue and status store backends.

Builds the configured backends from settings. The API uses the cached
getters so that one queue and one status store are shared per process,
which the in-memory backends rely on.
"""

from functools import lru_cache

from formrelay.config.settings import settings
from formrelay.sqs_queue.base import SubmissionQueue
from formrelay.storage.status import StatusStore


def build_queue(settings) -> SubmissionQueue:
    """
    Construct the configured submission queue.

    Raises:
        ValueError: If the queue settings are invalid
    """
    if settings.queue_backend == "memory":
        from formrelay.sqs_queue.memory import InMemorySubmissionQueue

        return InMemorySubmissionQueue(topic=settings.queue_topic)

    from formrelay.sqs_queue.sqs import SQSSubmissionQueue

    return SQSSubmissionQueue(
        queue_url=settings.queue_url,
        topic=settings.queue_topic,
        wait_seconds=settings.queue_wait_seconds,
        visibility_timeout=settings.queue_visibility_timeout,
        region_name=settings.aws_region
    )


def build_status_store(settings) -> StatusStore:
    """
    Construct the configured status store.

    Raises:
        ValueError: If the status store settings are invalid
    """
    if settings.status_backend == "memory":
        from formrelay.storage.status import InMemoryStatusStore

        return InMemoryStatusStore()

    from formrelay.storage.status import DynamoDBStatusStore

    return DynamoDBStatusStore(
        table_name=settings.status_table_name,
        region_name=settings.aws_region
    )


@lru_cache(maxsize=1)
def get_queue() -> SubmissionQueue:
    """Dependency returning the process-wide submission queue."""
    return build_queue(settings)


@lru_cache(maxsize=1)
def get_status_store() -> StatusStore:
    """Dependency returning the process-wide status store."""
    return build_status_store(settings)
