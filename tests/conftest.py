"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any import that might load settings.
"""

from __future__ import annotations

import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("SHEETS_API_KEY", "test-sheets-key")
os.environ.setdefault("CACHE_BACKEND", "memory")
os.environ.setdefault("RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

from app.adapters.sheets.base import AbstractSheetsClient
from app.adapters.store.base import AbstractKeyValueStore
from app.core.errors import UpstreamAppError


class FakeClock:
    """Deterministic clock used to test window and expiry logic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class FakeSheetsClient(AbstractSheetsClient):
    """Origin double returning canned rows and counting calls."""

    def __init__(self, rows: list[list[str]] | None = None, error: Exception | None = None) -> None:
        self.rows = rows or []
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def fetch_values(self, spreadsheet_id: str, cell_range: str) -> list[list[str]]:
        self.calls.append((spreadsheet_id, cell_range))
        if self.error is not None:
            raise self.error
        return [list(row) for row in self.rows]


class FailingStore(AbstractKeyValueStore):
    """Store whose every operation fails, like an unreachable backend."""

    def __init__(self) -> None:
        self.attempts = 0

    async def get(self, key: str) -> str | None:
        self.attempts += 1
        raise ConnectionError("store unreachable")

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self.attempts += 1
        raise ConnectionError("store unreachable")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def conference_rows() -> list[list[str]]:
    """Header row plus data rows shaped like the conference sheet (A:F)."""
    return [
        ["Name", "Link", "Usual time", "Date start", "Days", "Country"],
        ["Arctic Con", "arcticcon.no", "Early June", "22.06.2025", "2", "Norway"],
        ["", "blank.example", "", "01.01.2025", "1", ""],
        ["Nordic Sec", "https://nordicsec.example/2025", "", "Oct 6, 2025", "", "Sweden"],
    ]


@pytest.fixture
def upstream_error() -> UpstreamAppError:
    return UpstreamAppError(
        code="sheets_upstream_error",
        message="Spreadsheet API returned an error",
        details="503 Service Unavailable - backend error",
    )
