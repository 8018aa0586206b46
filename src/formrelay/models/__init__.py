"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains all data models used by FormRelay:
- Submission: Full submission record carried through the queue
- SubmissionFields: Caller-supplied business fields
- SubmissionStatus: Delivery status enum
- SubmissionAcceptedResponse / SubmissionStatusResponse: API responses

All models are exported here for convenient importing.
"""

from .submission import Submission, SubmissionFields, SubmissionStatus
from .response import SubmissionAcceptedResponse, SubmissionStatusResponse

__all__ = [
    "Submission",
    "SubmissionFields",
    "SubmissionStatus",
    "SubmissionAcceptedResponse",
    "SubmissionStatusResponse",
]
