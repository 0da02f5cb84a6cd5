"""Rate limiting adapters.

The limiter keeps its counters in an ``AbstractKeyValueStore`` so the same
mechanism works against the in-memory store or a shared external one.
"""

from app.adapters.rate_limit.base import (
    RATE_LIMIT_POLICIES,
    AbstractRateLimiter,
    RateLimitPolicy,
    RateLimitResult,
)
from app.adapters.rate_limit.fixed_window import FixedWindowRateLimiter

__all__ = [
    "RATE_LIMIT_POLICIES",
    "AbstractRateLimiter",
    "FixedWindowRateLimiter",
    "RateLimitPolicy",
    "RateLimitResult",
]
