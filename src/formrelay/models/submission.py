"""
Module: submission.py
Description: Submission data models for FormRelay.

Defines the business field set accepted from callers and the full
Submission record that travels through the queue to the sink.

Key Components:
- SubmissionStatus: Enum for delivery states
- SubmissionFields: Caller-supplied business fields (structural validation only)
- Submission: Full record with identity, creation time and status
- Queue wire format: to_queue_bytes() / from_queue_bytes()

Dependencies: pydantic, datetime, enum, typing
Author: FormRelay Team
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SubmissionStatus(str, Enum):
    """Delivery status of a submission."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class SubmissionFields(BaseModel):
    """
    Business fields of a form submission.

    All fields are opaque caller-supplied strings. Unknown keys are
    dropped and missing keys default to an empty string; there is no
    required-field enforcement.
    """

    model_config = ConfigDict(extra="ignore")

    date: str = ""
    time: str = ""
    department: str = ""
    event_type: str = ""
    responsible_teacher_contact: str = ""
    schedule_coordinator_contact: str = ""
    comments: str = ""
    group: str = ""
    student_category: str = ""
    required_equipment_list: str = ""
    discipline: str = ""
    practical_skills: str = ""
    specialty: str = ""
    stations: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        """Treat JSON null as an empty field."""
        if v is None:
            return ""
        return v


# Column order of a record appended to the sink
SINK_COLUMNS = (
    "id",
    "creation_date",
    "date",
    "time",
    "department",
    "event_type",
    "responsible_teacher_contact",
    "schedule_coordinator_contact",
    "comments",
    "group",
    "student_category",
    "required_equipment_list",
    "discipline",
    "practical_skills",
    "specialty",
    "stations",
)


class Submission(SubmissionFields):
    """
    A form submission moving through the delivery pipeline.

    The identifier and creation timestamp are assigned once at intake
    and cannot be reassigned afterwards. Only the status changes.

    Attributes:
        id: Unique submission identifier (128-bit random, hex encoded)
        creation_date: UTC timestamp assigned at intake
        status: Delivery status (pending, completed, failed)
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    id: str = Field(
        ...,
        min_length=1,
        frozen=True,
        description="Unique submission identifier"
    )
    creation_date: datetime = Field(
        ...,
        frozen=True,
        description="Submission creation timestamp"
    )
    status: SubmissionStatus = Field(
        default=SubmissionStatus.PENDING,
        description="Delivery status"
    )

    @classmethod
    def create(cls, fields: SubmissionFields) -> "Submission":
        """Assign identity and creation time to caller-supplied fields."""
        return cls(
            id=uuid4().hex,
            creation_date=datetime.now(timezone.utc),
            status=SubmissionStatus.PENDING,
            **fields.model_dump()
        )

    @classmethod
    def from_raw_fields(cls, raw_fields: Mapping[str, Any]) -> "Submission":
        """
        Validate a raw field mapping and build a pending submission.

        Raises:
            ValueError: If raw_fields is not a mapping
            pydantic.ValidationError: If a field value is not a string
        """
        if not isinstance(raw_fields, Mapping):
            raise ValueError("submission body must be a JSON object")
        return cls.create(SubmissionFields.model_validate(dict(raw_fields)))

    def to_queue_bytes(self) -> bytes:
        """Serialize the full record for the queue."""
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_queue_bytes(cls, data: bytes) -> "Submission":
        """
        Deserialize a queued record.

        Raises:
            pydantic.ValidationError: If the entry is not a valid submission
        """
        return cls.model_validate_json(data)

    def to_row(self) -> list:
        """Flatten the record into sink column order."""
        row = []
        for column in SINK_COLUMNS:
            value = getattr(self, column)
            row.append(value.isoformat() if isinstance(value, datetime) else value)
        return row
