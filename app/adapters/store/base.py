"""Key-value store interface shared by the rate limiter and the cache."""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractKeyValueStore(ABC):
    """String key-value store with per-entry expiry.

    Implementations may raise on connectivity problems; callers treat every
    store error as "unavailable" and degrade instead of failing the request.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when absent or expired."""
        raise NotImplementedError

    @abstractmethod
    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds`` seconds.

        Args:
            key: Entry key.
            value: Serialized value.
            ttl_seconds: Entry lifetime; must be >= 1.
        """
        raise NotImplementedError
