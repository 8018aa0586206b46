"""
Module: delivery/sink.py
Description: Downstream record sink contract and factory.

A sink accepts one submission per append call. Every failure, transient
or permanent, surfaces as SinkError; the retry policy does not tell
them apart.
"""

from abc import ABC, abstractmethod

from formrelay.models.submission import Submission


class SinkError(Exception):
    """Raised when the sink does not accept a record."""


class SinkConfigurationError(Exception):
    """Raised when a sink client cannot be constructed."""


class Sink(ABC):
    """Append-only record store submissions are delivered to."""

    @abstractmethod
    async def append(self, submission: Submission) -> None:
        """
        Append one record.

        Raises:
            SinkError: If the record was not accepted
        """

    async def close(self) -> None:
        """Release client resources."""


def build_sink(settings) -> Sink:
    """
    Construct the configured sink.

    Args:
        settings: Application settings

    Raises:
        SinkConfigurationError: If the selected sink is not fully configured
    """
    if settings.sink_backend == "sheets":
        from formrelay.delivery.sheets import GoogleSheetsSink

        token = settings.sheets_access_token
        return GoogleSheetsSink(
            spreadsheet_id=settings.sheets_spreadsheet_id,
            sheet_name=settings.sheets_sheet_name,
            access_token=token.get_secret_value() if token else None,
            timeout_seconds=settings.sink_timeout
        )

    if settings.sink_backend == "webhook":
        from formrelay.delivery.webhook import WebhookSink

        return WebhookSink(
            webhook_url=settings.webhook_url,
            timeout_seconds=settings.sink_timeout
        )

    raise SinkConfigurationError(f"Unknown sink backend: {settings.sink_backend}")
