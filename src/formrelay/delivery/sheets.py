"""
Module: delivery/sheets.py
Description: Google Sheets row-append sink.

Appends each submission as one row through the Sheets REST API
(``spreadsheets.values.append`` with RAW input). Obtaining the OAuth
access token is left to the deployment; the sink only sends it.
"""

from typing import Optional
from urllib.parse import quote

import httpx

from formrelay.delivery.sink import Sink, SinkConfigurationError, SinkError
from formrelay.models.submission import Submission
from formrelay.utils.logger import get_logger

logger = get_logger(__name__)

SHEETS_API_BASE = "https://sheets.googleapis.com"


class GoogleSheetsSink(Sink):
    """
    HTTP client appending submissions to a spreadsheet.

    Columns follow SINK_COLUMNS: id, creation date, then the business
    fields in form order.
    """

    def __init__(
        self,
        spreadsheet_id: Optional[str],
        sheet_name: str,
        access_token: Optional[str],
        timeout_seconds: int = 10,
        base_url: str = SHEETS_API_BASE,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize Sheets sink.

        Args:
            spreadsheet_id: Target spreadsheet ID
            sheet_name: Target sheet (tab) name
            access_token: OAuth bearer token with spreadsheets scope
            timeout_seconds: HTTP timeout in seconds
            base_url: Sheets API base URL
            client: Shared httpx client (created if not given)

        Raises:
            SinkConfigurationError: If any required argument is missing
        """
        if not spreadsheet_id or not isinstance(spreadsheet_id, str):
            raise SinkConfigurationError("spreadsheet_id must be a non-empty string")
        if not sheet_name or not isinstance(sheet_name, str):
            raise SinkConfigurationError("sheet_name must be a non-empty string")
        if not access_token or not isinstance(access_token, str):
            raise SinkConfigurationError("access_token must be a non-empty string")

        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self.append_url = (
            f"{base_url.rstrip('/')}/v4/spreadsheets/{quote(spreadsheet_id, safe='')}"
            f"/values/{quote(sheet_name, safe='')}:append"
        )
        self._headers = {'Authorization': f"Bearer {access_token}"}
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds, connect=timeout_seconds)
        )

        logger.info(
            "Google Sheets sink initialized",
            spreadsheet_id=spreadsheet_id,
            sheet_name=sheet_name,
            timeout_seconds=timeout_seconds
        )

    async def append(self, submission: Submission) -> None:
        """
        Append a submission as one row.

        Raises:
            SinkError: On timeout, network error or non-2xx response
        """
        body = {
            'majorDimension': 'ROWS',
            'values': [submission.to_row()],
        }

        try:
            response = await self._client.post(
                self.append_url,
                params={'valueInputOption': 'RAW'},
                json=body,
                headers=self._headers
            )
            response.raise_for_status()

        except httpx.TimeoutException as e:
            logger.warning(
                "Sheets append timeout",
                submission_id=submission.id,
                spreadsheet_id=self.spreadsheet_id
            )
            raise SinkError("Sheets append timed out") from e

        except httpx.HTTPStatusError as e:
            logger.warning(
                "Sheets append HTTP error",
                submission_id=submission.id,
                status_code=e.response.status_code,
                response=e.response.text[:500]
            )
            raise SinkError(f"Sheets append returned {e.response.status_code}") from e

        except httpx.HTTPError as e:
            logger.warning(
                "Sheets append network error",
                submission_id=submission.id,
                error=str(e)
            )
            raise SinkError(f"Sheets append failed: {e}") from e

        logger.info(
            "Submission appended to sheet",
            submission_id=submission.id,
            status_code=response.status_code
        )

    async def close(self) -> None:
        await self._client.aclose()
