"""
Module: test_submission.py
Description: Unit tests for Submission models.

Tests structural validation of caller fields, identity assignment,
immutability of identity and the queue wire format.
"""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from formrelay.models.submission import (
    SINK_COLUMNS,
    Submission,
    SubmissionFields,
    SubmissionStatus,
)


class TestSubmissionFields:
    """Test cases for caller field validation."""

    def test_missing_fields_default_to_empty(self):
        fields = SubmissionFields(department="Math")

        assert fields.department == "Math"
        assert fields.comments == ""
        assert fields.stations == ""

    def test_unknown_fields_are_dropped(self):
        fields = SubmissionFields.model_validate({"department": "Math", "favourite_colour": "blue"})

        assert "favourite_colour" not in fields.model_dump()

    def test_null_becomes_empty(self):
        fields = SubmissionFields.model_validate({"comments": None})

        assert fields.comments == ""

    def test_non_string_value_rejected(self):
        with pytest.raises(ValidationError):
            SubmissionFields.model_validate({"stations": 4})

        with pytest.raises(ValidationError):
            SubmissionFields.model_validate({"group": ["M-101"]})


class TestSubmission:
    """Test cases for the Submission record."""

    def test_create_assigns_identity(self, sample_fields):
        submission = Submission.from_raw_fields(sample_fields)

        assert len(submission.id) == 32
        int(submission.id, 16)
        assert submission.status == SubmissionStatus.PENDING
        assert submission.creation_date.tzinfo is not None
        assert submission.department == "Math"

    def test_identical_fields_get_distinct_ids(self, sample_fields):
        first = Submission.from_raw_fields(sample_fields)
        second = Submission.from_raw_fields(sample_fields)

        assert first.id != second.id

    def test_from_raw_fields_rejects_non_mapping(self):
        with pytest.raises(ValueError, match="JSON object"):
            Submission.from_raw_fields(["department", "Math"])

    def test_identity_is_immutable(self, sample_submission):
        with pytest.raises(ValidationError):
            sample_submission.id = "other"

        with pytest.raises(ValidationError):
            sample_submission.creation_date = datetime.now(timezone.utc)

    def test_status_can_change(self, sample_submission):
        sample_submission.status = SubmissionStatus.COMPLETED

        assert sample_submission.status == SubmissionStatus.COMPLETED

        with pytest.raises(ValidationError):
            sample_submission.status = "delivered"

    def test_queue_bytes_contain_full_record(self, sample_submission, sample_fields):
        data = json.loads(sample_submission.to_queue_bytes())

        assert data["id"] == sample_submission.id
        assert data["status"] == "pending"
        assert datetime.fromisoformat(data["creation_date"].replace("Z", "+00:00")) == sample_submission.creation_date
        for name, value in sample_fields.items():
            assert data[name] == value

    def test_from_queue_bytes_restores_record(self, sample_submission):
        restored = Submission.from_queue_bytes(sample_submission.to_queue_bytes())

        assert restored == sample_submission

    def test_from_queue_bytes_rejects_garbage(self):
        with pytest.raises(ValidationError):
            Submission.from_queue_bytes(b"not json at all")

        with pytest.raises(ValidationError):
            Submission.from_queue_bytes(b'{"department": "Math"}')

    def test_to_row_follows_column_order(self, sample_submission):
        row = sample_submission.to_row()

        assert len(row) == len(SINK_COLUMNS)
        assert row[0] == sample_submission.id
        assert row[1] == sample_submission.creation_date.isoformat()
        assert row[4] == "Math"
        assert row[-1] == "4"
