"""
Module: conftest.py
Description: Shared pytest fixtures for FormRelay tests.

Provides reusable fixtures for submissions, in-memory backends, a
controllable clock, recording sinks and moto-backed DynamoDB tables.
The environment is pinned before any formrelay import so the global
settings load without a .env file or AWS access.
"""

import os

os.environ["QUEUE_BACKEND"] = "memory"
os.environ["STATUS_BACKEND"] = "memory"
os.environ["METRICS_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["ALLOWED_NETWORKS"] = "[]"
os.environ["RUN_WORKER_IN_PROCESS"] = "false"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"

from typing import List

import boto3
import pytest
from moto import mock_aws

from formrelay.delivery.sink import Sink, SinkError
from formrelay.models.submission import Submission, SubmissionFields
from formrelay.sqs_queue.memory import InMemorySubmissionQueue
from formrelay.storage.status import InMemoryStatusStore


class FakeClock:
    """Clock returning a settable epoch time."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSink(Sink):
    """Sink that records appended submissions and fails on demand."""

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.calls = 0
        self.records: List[Submission] = []
        self.closed = False

    async def append(self, submission: Submission) -> None:
        self.calls += 1
        if self.failures < 0 or self.calls <= self.failures:
            raise SinkError(f"sink unavailable (call {self.calls})")
        self.records.append(submission)

    async def close(self) -> None:
        self.closed = True


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sample_fields():
    """
    Provide sample form fields for testing.

    Returns a typical submission body as posted by the form provider.
    """
    return {
        "date": "2026-03-14",
        "time": "10:30",
        "department": "Math",
        "event_type": "lab",
        "responsible_teacher_contact": "ivanova@example.edu",
        "schedule_coordinator_contact": "+7 900 000-00-00",
        "comments": "Bring calculators",
        "group": "M-101",
        "student_category": "undergraduate",
        "required_equipment_list": "projector, whiteboard",
        "discipline": "Linear Algebra",
        "practical_skills": "matrix operations",
        "specialty": "Applied Mathematics",
        "stations": "4",
    }


@pytest.fixture
def sample_submission(sample_fields):
    """Provide a pending Submission built from sample fields."""
    return Submission.create(SubmissionFields(**sample_fields))


@pytest.fixture
def memory_queue():
    """Provide an empty in-memory submission queue."""
    return InMemorySubmissionQueue()


@pytest.fixture
def clock():
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def memory_status_store(clock):
    """Provide an in-memory status store driven by the fake clock."""
    return InMemoryStatusStore(clock=clock)


@pytest.fixture
def recording_sleep():
    """Provide a sleep replacement that records delays."""
    return RecordingSleep()


@pytest.fixture
def status_table():
    """
    Create mock DynamoDB table for submission status.

    Uses moto to mock AWS DynamoDB with the production key schema.
    """
    with mock_aws():
        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
        table = dynamodb.create_table(
            TableName="test-submission-status",
            KeySchema=[
                {
                    'AttributeName': 'status_key',
                    'KeyType': 'HASH'
                }
            ],
            AttributeDefinitions=[
                {
                    'AttributeName': 'status_key',
                    'AttributeType': 'S'
                }
            ],
            BillingMode='PAY_PER_REQUEST'
        )
        yield table


@pytest.fixture
def make_sink():
    """
    Provide a RecordingSink factory.

    failures=N fails the first N appends; failures=-1 fails every append.
    """
    return RecordingSink
