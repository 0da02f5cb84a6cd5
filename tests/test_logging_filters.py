"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from app.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    redact_url_credentials,
    set_request_id,
)


@pytest.fixture
def capture() -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_api_keys(capture):
    logger, stream = capture

    logger.info(
        "test_event",
        extra={
            "api_key": "sheets-secret-123",
            "x-forwarded-for": "203.0.113.9",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()
    assert "sheets-secret-123" not in output
    assert "203.0.113.9" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_url_credentials_are_masked_in_messages_and_fields(capture):
    logger, stream = capture

    logger.info(
        "fetching %s",
        "https://sheets.googleapis.com/v4/spreadsheets/x/values/A:F?key=abc123",
        extra={"url": "https://sheets.googleapis.com/v4/spreadsheets/x/values/A:F?key=abc123&alt=json"},
    )

    output = stream.getvalue()
    assert "abc123" not in output
    assert "alt=json" in output


def test_redact_url_credentials_helper():
    assert redact_url_credentials("https://x/values/A:F?key=abc") == "https://x/values/A:F?key=[REDACTED]"
    assert redact_url_credentials("no credentials here") == "no credentials here"


def test_sensitive_filter_allows_safe_fields(capture):
    logger, stream = capture

    logger.info(
        "cache.set",
        extra={
            "cache_key": "breaches_data",
            "records": 12,
            "ttl_s": 300,
        },
    )

    data = json.loads(stream.getvalue())
    assert data["message"] == "cache.set"
    assert data["cache_key"] == "breaches_data"
    assert data["records"] == 12
    assert "[REDACTED]" not in stream.getvalue()


def test_sensitive_filter_redacts_nested_dicts(capture):
    logger, stream = capture

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "CF-Connecting-IP": "198.51.100.23",
                "user-agent": "pytest",
            },
        },
    )

    output = stream.getvalue()
    assert "198.51.100.23" not in output
    assert "[REDACTED]" in output
    assert "pytest" in output


def test_request_id_attached_from_context(capture):
    logger, stream = capture

    set_request_id("req-abc")
    try:
        logger.info("with_context")
    finally:
        clear_request_id()

    assert json.loads(stream.getvalue())["request_id"] == "req-abc"
