"""
Module: response.py
Description: API response models for FormRelay.

Defines the response bodies returned by the submission endpoints.

Dependencies: pydantic
Author: FormRelay Team
"""

from pydantic import BaseModel, Field


class SubmissionAcceptedResponse(BaseModel):
    """
    Response returned when a submission has been queued.

    The submission is not delivered yet; callers poll the status
    endpoint for the outcome.

    Example:
        {
            "status": "accepted",
            "message": "Submission queued for delivery",
            "id": "0c9a3f5e9b7d4a43b2f1d6e8a4c2b1f0"
        }
    """

    status: str = Field(default="accepted", description="Intake result")
    message: str = Field(
        default="Submission queued for delivery",
        description="Human-readable message"
    )
    id: str = Field(..., description="Assigned submission identifier")


class SubmissionStatusResponse(BaseModel):
    """Delivery status of a processed submission."""

    id: str = Field(..., description="Submission identifier")
    status: str = Field(..., description="Delivery status (completed or failed)")
