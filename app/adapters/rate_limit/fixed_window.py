"""Store-backed fixed-window rate limiter.

Notes:
- Fixed window, not sliding: a client can get up to ``2 * max_requests``
  through in a short burst straddling a window boundary. Accepted trade-off
  for a coarse anti-abuse control.
- Read-increment-write is not atomic; concurrent requests may under-count.
- Fails open: any store error admits the request.
"""

from __future__ import annotations

import hashlib
import logging
import math
import time
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitPolicy, RateLimitResult
from app.adapters.store.base import AbstractKeyValueStore

logger = logging.getLogger(__name__)


def hash_client_identity(client_identity: str) -> str:
    """Hash a client identity for logging without exposing addresses."""
    return hashlib.sha256(client_identity.encode()).hexdigest()[:16]


class FixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per client in fixed time windows.

    Counters live in the key-value store under
    ``rate_limit:<namespace>:<client>:<window_start>`` and expire with their
    window, so the store never accumulates stale windows.
    """

    def __init__(
        self,
        *,
        policy: RateLimitPolicy,
        store: AbstractKeyValueStore | None,
        namespace: str = "default",
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            policy: Window length and request budget.
            store: Counter storage; None disables enforcement (fail open).
            namespace: Key prefix separating limiters sharing a store.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If the policy values are invalid.
        """
        if policy.max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if policy.window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._policy = policy
        self._store = store
        self._namespace = namespace
        self._clock = clock

    @property
    def policy(self) -> RateLimitPolicy:
        return self._policy

    def _get_window_bounds(self, now: float) -> tuple[int, int]:
        """Return (window_start, reset_at) in epoch seconds for ``now``."""
        window = self._policy.window_seconds
        window_start = int(now // window) * window
        return window_start, window_start + window

    def _window_key(self, client_identity: str, window_start: int) -> str:
        return f"rate_limit:{self._namespace}:{client_identity}:{window_start}"

    def _fail_open(self, reset_at: int) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            limit=self._policy.max_requests,
            remaining=self._policy.max_requests - 1,
            reset_at=reset_at,
            retry_after_seconds=None,
        )

    async def admit(self, client_identity: str) -> RateLimitResult:
        """Check the client's budget for the current window and count the request.

        A request arriving when the counter already equals ``max_requests`` is
        rejected without incrementing it further.

        Args:
            client_identity: Client key; empty values share the "unknown" bucket.

        Returns:
            RateLimitResult with allowance decision and metadata.
        """
        client_identity = client_identity or "unknown"
        now = self._clock()
        window_start, reset_at = self._get_window_bounds(now)

        if self._store is None:
            return self._fail_open(reset_at)

        key = self._window_key(client_identity, window_start)
        limit = self._policy.max_requests

        try:
            raw_count = await self._store.get(key)
            count = int(raw_count) if raw_count else 0

            if count >= limit:
                retry_after = max(1, int(math.ceil(reset_at - now)))
                logger.warning(
                    "rate_limit.exceeded",
                    extra={
                        "namespace": self._namespace,
                        "client_hash": hash_client_identity(client_identity),
                        "limit": limit,
                        "window_s": self._policy.window_seconds,
                        "retry_after_s": retry_after,
                    },
                )
                return RateLimitResult(
                    allowed=False,
                    limit=limit,
                    remaining=0,
                    reset_at=reset_at,
                    retry_after_seconds=retry_after,
                )

            new_count = count + 1
            ttl_seconds = max(1, int(math.ceil(reset_at - now)))
            await self._store.put(key, str(new_count), ttl_seconds)
        except Exception as exc:
            logger.error(
                "rate_limit.store_error",
                extra={
                    "namespace": self._namespace,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return self._fail_open(reset_at)

        logger.debug(
            "rate_limit.allowed",
            extra={
                "namespace": self._namespace,
                "client_hash": hash_client_identity(client_identity),
                "limit": limit,
                "remaining": limit - new_count,
            },
        )
        return RateLimitResult(
            allowed=True,
            limit=limit,
            remaining=limit - new_count,
            reset_at=reset_at,
            retry_after_seconds=None,
        )
