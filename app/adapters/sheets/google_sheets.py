"""Google Sheets values API client adapter."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from app.adapters.sheets.base import AbstractSheetsClient
from app.core.errors import ConfigurationAppError, UpstreamAppError

logger = logging.getLogger(__name__)

# Upstream bodies can be large HTML pages; keep error details bounded.
_MAX_ERROR_BODY_CHARS = 500


class GoogleSheetsClient(AbstractSheetsClient):
    """Client for the Sheets ``spreadsheets.values.get`` endpoint.

    Performs exactly one request per call; retries are left to the caller's
    next (rate-limited) request.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://sheets.googleapis.com/v4/spreadsheets",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Server-held API key; None is reported on first use.
            base_url: Base URL of the Sheets API.
            timeout_seconds: Timeout for requests in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport

    def _build_url(self, spreadsheet_id: str, cell_range: str) -> str:
        return f"{self._base_url}/{quote(spreadsheet_id, safe='')}/values/{quote(cell_range, safe='!:')}"

    async def fetch_values(self, spreadsheet_id: str, cell_range: str) -> list[list[str]]:
        if not self._api_key:
            logger.error(
                "sheets.missing_api_key",
                extra={"spreadsheet_id": spreadsheet_id},
            )
            raise ConfigurationAppError(
                code="sheets_api_key_missing",
                message="Google Sheets API key not configured",
            )

        url = self._build_url(spreadsheet_id, cell_range)
        logger.info(
            "sheets.request",
            extra={"spreadsheet_id": spreadsheet_id, "cell_range": cell_range},
        )

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(url, params={"key": self._api_key})
        except httpx.HTTPError as exc:
            logger.error(
                "sheets.transport_error",
                extra={
                    "spreadsheet_id": spreadsheet_id,
                    "error_type": type(exc).__name__,
                },
            )
            raise UpstreamAppError(
                code="sheets_unreachable",
                message="Failed to reach spreadsheet API",
                details=type(exc).__name__,
            ) from exc

        if not response.is_success:
            body = response.text[:_MAX_ERROR_BODY_CHARS]
            logger.error(
                "sheets.upstream_error",
                extra={
                    "spreadsheet_id": spreadsheet_id,
                    "upstream_status": response.status_code,
                },
            )
            raise UpstreamAppError(
                code="sheets_upstream_error",
                message="Spreadsheet API returned an error",
                details=f"{response.status_code} {response.reason_phrase} - {body}",
            )

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise UpstreamAppError(
                code="sheets_invalid_payload",
                message="Spreadsheet API returned invalid JSON",
            ) from exc

        if not isinstance(payload, dict):
            raise UpstreamAppError(
                code="sheets_invalid_payload",
                message="Spreadsheet API returned an unexpected payload",
            )

        rows = payload.get("values") or []
        return [[_cell_to_str(cell) for cell in row] for row in rows if isinstance(row, list)]


def _cell_to_str(cell: Any) -> str:
    if cell is None:
        return ""
    return cell if isinstance(cell, str) else str(cell)
