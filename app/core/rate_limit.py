"""Client identity resolution and rate limit header helpers for the HTTP layer.

The limiter itself lives in ``app.adapters.rate_limit`` and is invoked by the
gateway; this module only translates between requests/responses and it.

Client identity comes from trusted proxy headers (``CF-Connecting-IP``, then
the first hop of ``X-Forwarded-For``). Requests without them share the
literal ``unknown`` bucket: acceptable degradation, not a security control.
"""

from __future__ import annotations

from fastapi import Request, Response

from app.adapters.rate_limit.base import RateLimitResult

UNKNOWN_CLIENT = "unknown"


def parse_header_list(value: str | None) -> list[str]:
    """Parse a comma-separated header list, dropping blanks.

    Examples:
        >>> parse_header_list("CF-Connecting-IP, X-Forwarded-For")
        ['CF-Connecting-IP', 'X-Forwarded-For']
        >>> parse_header_list(None)
        []
    """
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def resolve_client_identity(request: Request, trusted_headers: list[str]) -> str:
    """Return the client address reported by the first trusted header present.

    Args:
        request: Incoming request.
        trusted_headers: Header names checked in order.

    Returns:
        Client address, or "unknown" when no trusted header carries one.
    """
    for header in trusted_headers:
        value = request.headers.get(header)
        if not value:
            continue
        # X-Forwarded-For is "client, proxy1, proxy2"
        first_hop = value.split(",")[0].strip()
        if first_hop:
            return first_hop
    return UNKNOWN_CLIENT


def apply_rate_limit_headers(response: Response, result: RateLimitResult | None) -> None:
    """Copy X-RateLimit-* headers from an admission result onto a response."""
    if result is None:
        return
    for name, value in result.headers().items():
        response.headers[name] = value
