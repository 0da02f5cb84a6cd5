"""OpenAPI customization utilities.

Enriches the generated schema with:
- Tags metadata
- Response header documentation (X-Cache, X-RateLimit-*, Retry-After)
  for the data endpoints

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

_RATE_LIMIT_HEADERS: Dict[str, Any] = {
    "X-RateLimit-Limit": {
        "description": "Requests allowed per window.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Remaining": {
        "description": "Requests left in the current window.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Reset": {
        "description": "UNIX epoch seconds when the window resets.",
        "schema": {"type": "integer"},
    },
}

_CACHE_HEADER: Dict[str, Any] = {
    "X-Cache": {
        "description": "HIT when served from cache, MISS when fetched from the spreadsheet.",
        "schema": {"type": "string", "enum": ["HIT", "MISS"]},
    },
}

_RETRY_AFTER_HEADER: Dict[str, Any] = {
    "Retry-After": {
        "description": "Seconds until the rate limit window resets.",
        "schema": {"type": "integer"},
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and header docs."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {
                "name": "Data",
                "description": "Breach tracker and conference calendar records.",
            },
            {
                "name": "Health",
                "description": "Liveness checks.",
            },
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if not path.startswith("/api/"):
                continue
            for method_obj in methods.values():
                if not isinstance(method_obj, dict):
                    continue
                responses = method_obj.get("responses", {})
                if "200" in responses:
                    headers = responses["200"].setdefault("headers", {})
                    headers.update(_CACHE_HEADER)
                    headers.update(_RATE_LIMIT_HEADERS)
                if "429" in responses:
                    headers = responses["429"].setdefault("headers", {})
                    headers.update(_RATE_LIMIT_HEADERS)
                    headers.update(_RETRY_AFTER_HEADER)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
