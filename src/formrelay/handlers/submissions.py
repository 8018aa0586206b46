"""
Module: submissions.py
Description: Submission intake and status handlers.

Implements the inbound HTTP boundary of FormRelay:
- POST /submit: Validate structure, assign identity, queue for delivery
- GET /submissions/{submission_id}/status: Read the delivery outcome

Intake returns as soon as the submission is queued; delivery to the
sink happens later in the worker, so request latency never depends on
the sink.

Key Components:
- accept_submission(): Build and enqueue a pending submission
- submit_form(): POST /submit endpoint
- get_submission_status(): Status lookup endpoint

Dependencies: FastAPI, pydantic, typing
Author: FormRelay Team
"""

from typing import Any, Mapping

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi import status as status_codes

from formrelay.auth.network import require_allowed_network
from formrelay.backends import get_queue, get_status_store
from formrelay.config.settings import settings
from formrelay.models.response import SubmissionAcceptedResponse, SubmissionStatusResponse
from formrelay.models.submission import Submission
from formrelay.sqs_queue.base import QueueError, SubmissionQueue
from formrelay.storage.status import StatusStore
from formrelay.utils.logger import get_logger
from formrelay.utils.metrics import MetricsClient

router = APIRouter(tags=["submissions"])
logger = get_logger(__name__)


def get_metrics_client() -> MetricsClient:
    """
    Dependency to get CloudWatch metrics client.

    Returns:
        Configured MetricsClient instance
    """
    return MetricsClient(enabled=settings.metrics_enabled)


async def accept_submission(raw_fields: Mapping[str, Any], queue: SubmissionQueue) -> Submission:
    """
    Create a pending submission and put it on the queue.

    Args:
        raw_fields: Business field names mapped to string values
        queue: Submission queue

    Returns:
        The queued submission with its assigned id

    Raises:
        ValueError: If raw_fields does not have the submission structure
        QueueError: If the submission could not be queued
    """
    submission = Submission.from_raw_fields(raw_fields)
    await queue.enqueue(submission.to_queue_bytes(), message_id=submission.id)

    logger.info(
        "Submission queued",
        submission_id=submission.id,
        department=submission.department,
        event_type=submission.event_type
    )

    return submission


@router.post(
    "/submit",
    status_code=status_codes.HTTP_202_ACCEPTED,
    response_model=SubmissionAcceptedResponse,
    dependencies=[Depends(require_allowed_network)]
)
async def submit_form(
    request: Request,
    queue: SubmissionQueue = Depends(get_queue),
    metrics_client: MetricsClient = Depends(get_metrics_client)
) -> SubmissionAcceptedResponse:
    """
    Accept a form submission for asynchronous delivery.

    Raises:
        HTTPException: 400 if the body is not a JSON object of string fields
        HTTPException: 500 if the submission could not be queued

    Example:
        POST /submit
        {"department": "Math", "event_type": "lab"}

        Response (202 Accepted):
        {
            "status": "accepted",
            "message": "Submission queued for delivery",
            "id": "0c9a3f5e9b7d4a43b2f1d6e8a4c2b1f0"
        }
    """
    try:
        raw_fields = await request.json()
    except ValueError:
        logger.warning("Submission body is not valid JSON")
        raise HTTPException(
            status_code=status_codes.HTTP_400_BAD_REQUEST,
            detail="Invalid JSON format"
        )

    try:
        submission = await accept_submission(raw_fields, queue)

    except ValueError as e:
        logger.warning("Submission validation failed", error=str(e))
        raise HTTPException(
            status_code=status_codes.HTTP_400_BAD_REQUEST,
            detail=f"Invalid submission: {str(e)}"
        )

    except QueueError as e:
        logger.error("Failed to queue submission", error=str(e))
        raise HTTPException(
            status_code=status_codes.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to queue submission"
        )

    metrics_client.put_metric(metric_name="SubmissionAccepted", value=1.0)

    return SubmissionAcceptedResponse(id=submission.id)


@router.get(
    "/submissions/{submission_id}/status",
    response_model=SubmissionStatusResponse
)
async def get_submission_status(
    submission_id: str,
    status_store: StatusStore = Depends(get_status_store)
) -> SubmissionStatusResponse:
    """
    Return the delivery outcome of a submission.

    A 404 means the submission was either not processed yet or its
    status record has expired.

    Raises:
        HTTPException: 404 if no status record exists
        HTTPException: 500 if the status store fails
    """
    try:
        status = await status_store.get_status(submission_id)
    except Exception as e:
        logger.error(
            "Failed to read submission status",
            submission_id=submission_id,
            error=str(e)
        )
        raise HTTPException(
            status_code=status_codes.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read submission status"
        )

    if status is None:
        raise HTTPException(
            status_code=status_codes.HTTP_404_NOT_FOUND,
            detail="No status recorded (not processed yet or expired)"
        )

    return SubmissionStatusResponse(id=submission_id, status=status)
