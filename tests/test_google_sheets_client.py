"""Tests for the Google Sheets client adapter using httpx.MockTransport."""

import httpx
import pytest

from app.adapters.sheets.google_sheets import GoogleSheetsClient
from app.core.errors import ConfigurationAppError, UpstreamAppError


def _client(handler, api_key: str | None = "secret-key") -> GoogleSheetsClient:
    return GoogleSheetsClient(
        api_key=api_key,
        base_url="https://sheets.test/v4/spreadsheets",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_values_builds_request_and_returns_rows() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"range": "A1:F3", "values": [["Name", "Link"], ["Arctic Con", 2, None]]})

    rows = await _client(handler).fetch_values("sheet-1", "Data Breach Tracker!A:J")

    assert rows == [["Name", "Link"], ["Arctic Con", "2", ""]]
    assert len(seen) == 1
    request = seen[0]
    assert request.method == "GET"
    assert request.url.params["key"] == "secret-key"
    assert request.url.raw_path.startswith(b"/v4/spreadsheets/sheet-1/values/Data%20Breach%20Tracker!A:J")


@pytest.mark.asyncio
async def test_missing_values_means_empty_table() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"range": "A1:F1", "majorDimension": "ROWS"})

    assert await _client(handler).fetch_values("sheet-1", "A:F") == []


@pytest.mark.asyncio
async def test_missing_api_key_is_configuration_error_without_network_call() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    with pytest.raises(ConfigurationAppError) as exc_info:
        await _client(handler, api_key=None).fetch_values("sheet-1", "A:F")

    assert exc_info.value.message == "Google Sheets API key not configured"
    assert calls == []


@pytest.mark.asyncio
async def test_non_success_status_is_upstream_error_with_details() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="API key not valid")

    with pytest.raises(UpstreamAppError) as exc_info:
        await _client(handler).fetch_values("sheet-1", "A:F")

    assert exc_info.value.details == "403 Forbidden - API key not valid"
    assert "secret-key" not in (exc_info.value.details or "")


@pytest.mark.asyncio
async def test_transport_failure_is_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(UpstreamAppError) as exc_info:
        await _client(handler).fetch_values("sheet-1", "A:F")

    assert exc_info.value.code == "sheets_unreachable"


@pytest.mark.asyncio
async def test_invalid_json_is_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(UpstreamAppError):
        await _client(handler).fetch_values("sheet-1", "A:F")
