"""End-to-end tests for the data endpoints.

The real app is used with ``get_gateway`` overridden so the origin is a fake
with a call counter and the store is a fresh in-memory instance.
"""

from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.adapters.rate_limit.base import RateLimitPolicy
from app.adapters.rate_limit.fixed_window import FixedWindowRateLimiter
from app.adapters.store.in_memory import InMemoryKeyValueStore
from app.api.dependencies import build_resources, get_gateway
from app.core.config import settings
from app.core.errors import ConfigurationAppError
from app.main import app
from app.services.gateway import CachedGateway, CachePolicy
from conftest import FakeSheetsClient


def _install_gateway(origin: FakeSheetsClient, *, max_requests: int = 100) -> CachedGateway:
    store = InMemoryKeyValueStore()
    policy = RateLimitPolicy(window_seconds=3600, max_requests=max_requests)
    gateway = CachedGateway(
        resources=build_resources(settings.sheets),
        origin=origin,
        store=store,
        limiters={
            "breaches": FixedWindowRateLimiter(policy=policy, store=store, namespace="test"),
            "conferences": FixedWindowRateLimiter(policy=policy, store=store, namespace="test"),
        },
        cache_policy=CachePolicy(ttl_seconds=300, empty_ttl_seconds=60),
    )
    app.dependency_overrides[get_gateway] = lambda: gateway
    return gateway


@pytest.fixture
def client() -> Iterator[TestClient]:
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_conferences_miss_then_hit(client: TestClient) -> None:
    origin = FakeSheetsClient([
        ["Name", "Link", "Usual time", "Date start", "Days", "Country"],
        ["Arctic Con", "arcticcon.no", "Early June", "22.06.2025", "2", "Norway"],
        ["", "blank.example", "", "01.01.2025", "1", ""],
    ])
    _install_gateway(origin)

    first = client.get("/api/conferences")

    assert first.status_code == 200
    assert first.headers["X-Cache"] == "MISS"
    assert first.json() == [
        {
            "name": "Arctic Con",
            "date": "2025-06-22",
            "location": "Norway",
            "website": "https://arcticcon.no/",
            "description": "2 days | Early June",
            "type": "Conference",
        }
    ]

    second = client.get("/api/conferences")

    assert second.status_code == 200
    assert second.headers["X-Cache"] == "HIT"
    assert second.json() == first.json()
    assert len(origin.calls) == 1


def test_breaches_sorted_with_undated_last(client: TestClient) -> None:
    origin = FakeSheetsClient([
        ["Data Breach Tracker"],
        ["Company", "", "Type", "", "Year", "", "", "", "", "Source"],
        ["Old AS", "", "Leak", "", "2019"],
        ["Unknown AS", "", "Phishing", "", ""],
        ["New AS", "", "Ransomware", "", "12.03.2024", "", "", "", "", "nrk.no/x"],
    ])
    _install_gateway(origin)

    response = client.get("/api/breaches")

    assert response.status_code == 200
    body = response.json()
    assert [b["organization"] for b in body] == ["New AS", "Old AS", "Unknown AS"]
    assert [b["date"] for b in body] == ["2024-03-12", "2019-01-01", ""]
    assert body[0]["source"] == "https://nrk.no/x"


def test_success_carries_rate_limit_headers(client: TestClient) -> None:
    _install_gateway(FakeSheetsClient([["Name"], ["A"]]), max_requests=5)

    response = client.get("/api/conferences", headers={"CF-Connecting-IP": "203.0.113.7"})

    assert response.headers["X-RateLimit-Limit"] == "5"
    assert response.headers["X-RateLimit-Remaining"] == "4"
    assert int(response.headers["X-RateLimit-Reset"]) > 0
    assert response.headers["X-Request-ID"]


def test_rate_limit_exceeded_returns_429(client: TestClient) -> None:
    origin = FakeSheetsClient([["Name"], ["A"]])
    _install_gateway(origin, max_requests=2)
    headers = {"X-Forwarded-For": "198.51.100.1, 10.0.0.1"}

    assert client.get("/api/conferences", headers=headers).status_code == 200
    assert client.get("/api/conferences", headers=headers).status_code == 200
    blocked = client.get("/api/conferences", headers=headers)

    assert blocked.status_code == 429
    body = blocked.json()
    assert body["error"] == "Rate limit exceeded"
    assert body["retryAfter"] > 0
    assert blocked.headers["Retry-After"] == str(body["retryAfter"])
    assert blocked.headers["X-RateLimit-Remaining"] == "0"
    assert "X-Cache" not in blocked.headers

    # A different client still gets through
    other = client.get("/api/conferences", headers={"X-Forwarded-For": "198.51.100.2"})
    assert other.status_code == 200
    assert len(origin.calls) == 1


def test_clients_without_address_share_unknown_bucket(client: TestClient) -> None:
    _install_gateway(FakeSheetsClient([["Name"], ["A"]]), max_requests=1)

    assert client.get("/api/conferences").status_code == 200
    assert client.get("/api/conferences").status_code == 429


def test_upstream_error_returns_502(client: TestClient, upstream_error) -> None:
    _install_gateway(FakeSheetsClient(error=upstream_error))

    response = client.get("/api/breaches")

    assert response.status_code == 502
    assert response.json() == {
        "error": "Spreadsheet API returned an error",
        "details": "503 Service Unavailable - backend error",
    }


def test_missing_credential_returns_500(client: TestClient) -> None:
    _install_gateway(FakeSheetsClient(error=ConfigurationAppError(
        code="sheets_api_key_missing",
        message="Google Sheets API key not configured",
    )))

    response = client.get("/api/conferences")

    assert response.status_code == 500
    assert response.json() == {"error": "Google Sheets API key not configured"}


def test_empty_table_returns_empty_list(client: TestClient) -> None:
    _install_gateway(FakeSheetsClient([]))

    response = client.get("/api/conferences")

    assert response.status_code == 200
    assert response.json() == []


def test_cors_preflight(client: TestClient) -> None:
    response = client.options(
        "/api/breaches",
        headers={
            "Origin": "https://example.org",
            "Access-Control-Request-Method": "GET",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in {"*", "https://example.org"}
    assert response.content == b""
    assert "GET" in response.headers["access-control-allow-methods"]


@pytest.mark.parametrize("path", ["/api/breaches", "/api/conferences"])
def test_plain_options_returns_empty_body(client: TestClient, path: str) -> None:
    origin = FakeSheetsClient([["Name"], ["A"]])
    _install_gateway(origin)

    response = client.options(path)

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["allow"] == "GET, OPTIONS"
    assert origin.calls == []


def test_unknown_path_uses_error_shape(client: TestClient) -> None:
    response = client.get("/api/jobs")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_health_is_not_rate_limited(client: TestClient) -> None:
    _install_gateway(FakeSheetsClient(), max_requests=1)

    for _ in range(3):
        assert client.get("/health").json() == {"status": "ok"}
