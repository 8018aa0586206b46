"""
Module: delivery/webhook.py
Description: Webhook sink.

Delivers each submission by POSTing its full JSON record to a
configured URL. Any 2xx response counts as accepted.
"""

from typing import Optional

import httpx

from formrelay.delivery.sink import Sink, SinkConfigurationError, SinkError
from formrelay.models.submission import Submission
from formrelay.utils.logger import get_logger

logger = get_logger(__name__)


class WebhookSink(Sink):
    """HTTP client pushing submissions to a webhook."""

    def __init__(
        self,
        webhook_url: Optional[str],
        timeout_seconds: int = 10,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize webhook sink.

        Args:
            webhook_url: Webhook URL for delivery
            timeout_seconds: HTTP timeout in seconds
            client: Shared httpx client (created if not given)

        Raises:
            SinkConfigurationError: If webhook_url is invalid
        """
        if not webhook_url or not isinstance(webhook_url, str):
            raise SinkConfigurationError("webhook_url must be a non-empty string")
        if not webhook_url.startswith(('http://', 'https://')):
            raise SinkConfigurationError("webhook_url must be a valid HTTP/HTTPS URL")

        self.webhook_url = webhook_url
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds, connect=timeout_seconds)
        )

        logger.info(
            "Webhook sink initialized",
            webhook_url=webhook_url,
            timeout_seconds=timeout_seconds
        )

    async def append(self, submission: Submission) -> None:
        """
        POST the submission record to the webhook.

        Raises:
            SinkError: On timeout, network error or non-2xx response
        """
        try:
            response = await self._client.post(
                self.webhook_url,
                content=submission.to_queue_bytes(),
                headers={'Content-Type': 'application/json'}
            )
            response.raise_for_status()

        except httpx.TimeoutException as e:
            logger.warning(
                "Webhook delivery timeout",
                submission_id=submission.id,
                webhook_url=self.webhook_url
            )
            raise SinkError("Webhook delivery timed out") from e

        except httpx.HTTPStatusError as e:
            logger.warning(
                "Webhook delivery HTTP error",
                submission_id=submission.id,
                status_code=e.response.status_code,
                response=e.response.text[:500]
            )
            raise SinkError(f"Webhook returned {e.response.status_code}") from e

        except httpx.HTTPError as e:
            logger.warning(
                "Webhook delivery network error",
                submission_id=submission.id,
                error=str(e)
            )
            raise SinkError(f"Webhook delivery failed: {e}") from e

        logger.info(
            "Submission delivered to webhook",
            submission_id=submission.id,
            status_code=response.status_code
        )

    async def close(self) -> None:
        await self._client.aclose()
