"""
Module: delivery/worker.py
Description: Queue consumer delivering submissions to the sink.

Runs one long-lived loop per worker: block on the queue, decode the
entry, append it to the sink with bounded retries, record the outcome
in the status store and acknowledge the entry. The loop only ends when
a stop is requested; a sink that cannot be constructed aborts the
process at startup.

Key Components:
- DeliveryWorker: Cancellable consumer loop with injected dependencies
- DeliveryOutcome: Terminal result for one submission
- main(): Entry point of the standalone worker process

Dependencies: asyncio, pydantic, tenacity (via retry), structlog
"""

import asyncio
import contextlib
import signal
import sys
from dataclasses import dataclass
from datetime import timedelta
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from formrelay.delivery.retry import RetryPolicy, deliver_with_retry
from formrelay.delivery.sink import Sink, SinkConfigurationError
from formrelay.models.submission import Submission, SubmissionStatus
from formrelay.sqs_queue.base import QueuedMessage, QueueError, SubmissionQueue
from formrelay.storage.status import StatusStore
from formrelay.utils.logger import get_logger
from formrelay.utils.metrics import MetricsClient

logger = get_logger(__name__)

DEFAULT_STATUS_TTL = timedelta(hours=24)


@dataclass(frozen=True)
class DeliveryOutcome:
    """Terminal result of processing one queued submission."""

    submission_id: str
    status: SubmissionStatus
    attempts: int
    error: Optional[str] = None


class DeliveryWorker:
    """
    Single-consumer delivery loop.

    Each dequeued submission is owned by exactly one iteration and is
    fully processed (delivered or failed, status written, entry
    acknowledged) before the next entry is taken. Retries therefore
    hold up every submission queued behind the current one.

    Attributes:
        queue: Submission queue to consume
        sink: Record sink to deliver to
        status_store: Store receiving the terminal status
        retry_policy: Attempts and delay for sink delivery
        status_ttl: Retention window of status records
    """

    def __init__(
        self,
        queue: SubmissionQueue,
        sink: Sink,
        status_store: StatusStore,
        retry_policy: Optional[RetryPolicy] = None,
        status_ttl: timedelta = DEFAULT_STATUS_TTL,
        metrics_client: Optional[MetricsClient] = None,
        queue_error_backoff: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.queue = queue
        self.sink = sink
        self.status_store = status_store
        self.retry_policy = retry_policy or RetryPolicy()
        self.status_ttl = status_ttl
        self.metrics_client = metrics_client
        self.queue_error_backoff = queue_error_backoff
        self._sleep = sleep
        self._stopping = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, settings, queue, sink, status_store, metrics_client=None) -> "DeliveryWorker":
        """Build a worker using the delivery settings."""
        return cls(
            queue=queue,
            sink=sink,
            status_store=status_store,
            retry_policy=RetryPolicy(
                max_retries=settings.delivery_max_retries,
                retry_delay=settings.delivery_retry_delay,
                attempt_timeout=settings.sink_timeout
            ),
            status_ttl=timedelta(hours=settings.status_ttl_hours),
            metrics_client=metrics_client,
            queue_error_backoff=settings.queue_error_backoff
        )

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def process_next(self) -> Optional[DeliveryOutcome]:
        """
        Dequeue and process exactly one entry.

        Returns:
            DeliveryOutcome, or None if the entry was malformed and dropped

        Raises:
            QueueError: If the queue cannot be polled
        """
        message = await self.queue.dequeue()
        return await self.handle(message)

    async def handle(self, message: QueuedMessage) -> Optional[DeliveryOutcome]:
        """Deliver one received entry and record its outcome."""
        try:
            submission = Submission.from_queue_bytes(message.body)
        except ValidationError as e:
            # Unrecoverable entry: acknowledge so it is not redelivered
            logger.error(
                "Discarding malformed queue entry",
                error=str(e),
                body=message.body[:200].decode('utf-8', errors='replace')
            )
            await self._ack(message, submission_id=None)
            self._put_metric("MalformedEntryDropped", 1.0)
            return None

        logger.info("Processing submission", submission_id=submission.id)

        result = await deliver_with_retry(
            self.sink,
            submission,
            self.retry_policy,
            sleep=self._sleep
        )

        submission.status = SubmissionStatus.COMPLETED if result.success else SubmissionStatus.FAILED

        await self._record_status(submission)
        await self._ack(message, submission_id=submission.id)

        if result.success:
            self._put_metric("SubmissionCompleted", 1.0)
        else:
            self._put_metric("SubmissionFailed", 1.0)
        self._put_metric("DeliveryAttempts", float(result.attempts))

        logger.info(
            "Submission processed",
            submission_id=submission.id,
            status=submission.status.value,
            attempts=result.attempts
        )

        return DeliveryOutcome(
            submission_id=submission.id,
            status=submission.status,
            attempts=result.attempts,
            error=result.error
        )

    async def run(self) -> None:
        """Consume the queue until stop is requested."""
        self._stopping.clear()
        logger.info(
            "Delivery worker started",
            max_attempts=self.retry_policy.max_attempts,
            retry_delay=self.retry_policy.retry_delay
        )

        while not self._stopping.is_set():
            try:
                message = await self._next_message()
            except QueueError as e:
                logger.error("Error polling queue", error=str(e))
                await self._wait_for_stop(self.queue_error_backoff)
                continue
            except Exception as e:
                logger.error(
                    "Unexpected error polling queue",
                    error=str(e),
                    error_type=type(e).__name__
                )
                await self._wait_for_stop(self.queue_error_backoff)
                continue

            if message is None:
                break

            try:
                await self.handle(message)
            except Exception as e:
                logger.error(
                    "Unexpected error processing queue entry",
                    error=str(e),
                    error_type=type(e).__name__
                )

        logger.info("Delivery worker stopped")

    async def start(self) -> None:
        """Start the consumer loop as a background task."""
        if self.running:
            return
        self._task = asyncio.create_task(self.run(), name="delivery_worker")

    def request_stop(self) -> None:
        """Stop taking new entries; the in-flight entry is finished."""
        self._stopping.set()

    async def stop(self, timeout: Optional[float] = 30.0) -> None:
        """
        Stop the background loop.

        Waits up to timeout seconds for the in-flight submission, then
        cancels it. A cancelled entry is left unacknowledged.
        """
        self.request_stop()
        if self._task is None:
            return

        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout)
        except asyncio.TimeoutError:
            logger.warning("Abandoning in-flight delivery at shutdown", timeout=timeout)
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        finally:
            self._task = None

    async def _next_message(self) -> Optional[QueuedMessage]:
        """Wait for an entry or a stop request, whichever comes first."""
        dequeue = asyncio.ensure_future(self.queue.dequeue())
        stopped = asyncio.ensure_future(self._stopping.wait())
        try:
            done, _ = await asyncio.wait(
                {dequeue, stopped},
                return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            stopped.cancel()

        if dequeue in done:
            return dequeue.result()

        dequeue.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await dequeue
        return None

    async def _wait_for_stop(self, seconds: float) -> None:
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._stopping.wait(), seconds)

    async def _record_status(self, submission: Submission) -> None:
        try:
            await self.status_store.set_status(
                submission.id,
                submission.status.value,
                self.status_ttl
            )
        except Exception as e:
            # Status is observability only; delivery already happened
            logger.error(
                "Failed to record submission status",
                submission_id=submission.id,
                status=submission.status.value,
                error=str(e)
            )

    async def _ack(self, message: QueuedMessage, submission_id: Optional[str]) -> None:
        try:
            await self.queue.ack(message)
        except QueueError as e:
            logger.error(
                "Failed to acknowledge queue entry",
                submission_id=submission_id,
                error=str(e)
            )

    def _put_metric(self, name: str, value: float) -> None:
        if self.metrics_client is not None:
            self.metrics_client.put_metric(metric_name=name, value=value)


async def run_worker(settings) -> None:
    """
    Build the pipeline from settings and consume until SIGINT/SIGTERM.

    Raises:
        SinkConfigurationError: If the sink cannot be constructed
        ValueError: If the queue or status store is misconfigured
    """
    from formrelay.backends import build_queue, build_status_store
    from formrelay.delivery.sink import build_sink

    sink = build_sink(settings)
    queue = build_queue(settings)
    status_store = build_status_store(settings)
    metrics_client = MetricsClient(enabled=settings.metrics_enabled)

    worker = DeliveryWorker.from_settings(
        settings,
        queue=queue,
        sink=sink,
        status_store=status_store,
        metrics_client=metrics_client
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, worker.request_stop)

    try:
        await worker.run()
    finally:
        await sink.close()
        await queue.close()


def main() -> int:
    """Entry point of the ``formrelay-worker`` process."""
    from formrelay.config.settings import settings

    try:
        asyncio.run(run_worker(settings))
    except (SinkConfigurationError, ValueError) as e:
        logger.critical("Delivery worker failed to start", error=str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
