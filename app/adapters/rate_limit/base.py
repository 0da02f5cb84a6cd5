"""Rate limiter interfaces and policies.

The gateway depends on this abstraction (not the concrete implementation)
so the counting strategy can change without touching request handling.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitPolicy:
    """Window length and budget for one class of endpoints."""

    window_seconds: int
    max_requests: int


# Standard API endpoints, strict endpoints and bulk endpoints
RATE_LIMIT_POLICIES: dict[str, RateLimitPolicy] = {
    "standard": RateLimitPolicy(window_seconds=60, max_requests=100),
    "strict": RateLimitPolicy(window_seconds=60, max_requests=10),
    "bulk": RateLimitPolicy(window_seconds=60 * 60, max_requests=10),
}


@dataclass(frozen=True)
class RateLimitResult:
    """Result of an admission check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the current window resets.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None

    def headers(self) -> dict[str, str]:
        """Render the X-RateLimit-* (and Retry-After when blocked) headers."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_at),
        }
        if self.retry_after_seconds is not None:
            headers["Retry-After"] = str(self.retry_after_seconds)
        return headers


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    async def admit(self, client_identity: str) -> RateLimitResult:
        """Count one request for ``client_identity`` and decide admission.

        Args:
            client_identity: Client key (e.g. proxy-reported IP or "unknown").

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError
