"""
Package: sqs_queue
Description: Durable FIFO queue between submission intake and delivery.

Provides the SubmissionQueue contract, the SQS backend used in
deployment and an in-memory backend for local runs and tests.
"""

from .base import QueuedMessage, QueueError, SubmissionQueue

__all__ = [
    "QueuedMessage",
    "QueueError",
    "SubmissionQueue",
]
