"""
Module: delivery/retry.py
Description: Retry logic for sink delivery.

Retries a failed append a fixed number of times with a fixed delay
between attempts. There is no exponential backoff, no jitter and no
distinction between transient and permanent sink errors.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from formrelay.delivery.sink import Sink, SinkError
from formrelay.models.submission import Submission
from formrelay.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Delivery retry policy.

    Attributes:
        max_retries: Retries after the first attempt; total attempts is max_retries + 1
        retry_delay: Seconds between consecutive attempts
        attempt_timeout: Deadline in seconds for one whole attempt (None for no limit)
    """

    max_retries: int = 3
    retry_delay: float = 2.0
    attempt_timeout: Optional[float] = None

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must be >= 0")
        if self.attempt_timeout is not None and self.attempt_timeout <= 0:
            raise ValueError("attempt_timeout must be > 0")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    @property
    def max_duration(self) -> Optional[float]:
        """Upper bound in seconds for delivering one submission."""
        if self.attempt_timeout is None:
            return None
        return self.max_attempts * self.attempt_timeout + self.max_retries * self.retry_delay


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of delivering one submission."""

    success: bool
    attempts: int
    error: Optional[str] = None


def _log_retry(submission_id: str):
    def before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Delivery attempt failed, retrying",
            submission_id=submission_id,
            attempt=retry_state.attempt_number,
            retry_in_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
            error=str(exc)
        )
    return before_sleep


async def _append_within_deadline(
    sink: Sink,
    submission: Submission,
    timeout: Optional[float]
) -> None:
    if timeout is None:
        await sink.append(submission)
        return

    try:
        await asyncio.wait_for(sink.append(submission), timeout)
    except asyncio.TimeoutError as e:
        raise SinkError(f"Delivery attempt exceeded {timeout}s") from e


async def deliver_with_retry(
    sink: Sink,
    submission: Submission,
    policy: RetryPolicy,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
) -> DeliveryResult:
    """
    Append a submission to the sink, retrying on any error.

    Args:
        sink: Sink to deliver to
        submission: Submission to deliver
        policy: Retry policy
        sleep: Coroutine used to wait between attempts

    Returns:
        DeliveryResult; sink errors never propagate
    """
    attempts = 0
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_fixed(policy.retry_delay),
        retry=retry_if_exception_type(Exception),
        before_sleep=_log_retry(submission.id),
        sleep=sleep,
        reraise=True
    )

    try:
        async for attempt in retrying:
            with attempt:
                attempts += 1
                await _append_within_deadline(sink, submission, policy.attempt_timeout)

    except Exception as e:
        logger.error(
            "Delivery failed after all attempts",
            submission_id=submission.id,
            attempts=attempts,
            error=str(e),
            error_type=type(e).__name__
        )
        return DeliveryResult(success=False, attempts=attempts, error=str(e))

    return DeliveryResult(success=True, attempts=attempts)
