"""In-memory key-value store with TTL and LRU eviction.

Notes:
- Per-process only: running multiple workers gives each worker its own
  cache and its own rate limit counters.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from app.adapters.store.base import AbstractKeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class _StoreItem:
    value: str
    expires_at: float


class InMemoryKeyValueStore(AbstractKeyValueStore):
    """Thread-safe, in-memory string store with per-entry expiry.

    Attributes:
        max_entries: Maximum number of stored items (None for unlimited).
    """

    def __init__(
        self,
        *,
        max_entries: int | None = 4096,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be >= 1 or None")

        self._max_entries = max_entries
        self._clock = clock
        self._items: OrderedDict[str, _StoreItem] = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"InMemoryKeyValueStore(max_entries={self._max_entries}, "
            f"size={len(self._items)}, hits={self._hits}, misses={self._misses}, "
            f"evictions={self._evictions})"
        )

    async def get(self, key: str) -> str | None:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                self._misses += 1
                return None

            if self._clock() >= item.expires_at:
                self._evict_single(key)
                self._misses += 1
                return None

            self._hits += 1
            self._items.move_to_end(key)
            return item.value

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")

        with self._lock:
            self._evict_expired_locked()
            self._items[key] = _StoreItem(value=value, expires_at=self._clock() + ttl_seconds)
            self._items.move_to_end(key)
            self._evict_if_over_capacity_locked()

    def clear(self) -> None:
        """Remove all entries and reset counters."""

        with self._lock:
            self._items.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def stats(self) -> dict[str, int | None]:
        """Return lightweight store metrics without exposing values."""

        with self._lock:
            return {
                "max_entries": self._max_entries,
                "entries": len(self._items),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def _evict_single(self, key: str) -> None:
        if key in self._items:
            self._items.pop(key, None)
            self._evictions += 1

    def _evict_expired_locked(self) -> None:
        now = self._clock()
        expired_keys = [k for k, item in self._items.items() if item.expires_at <= now]
        for key in expired_keys:
            self._evict_single(key)

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_entries is None:
            return

        while len(self._items) > self._max_entries:
            # popitem(last=False) removes the least recently used entry
            key, _ = self._items.popitem(last=False)
            self._evictions += 1
            logger.debug("store.evicted", extra={"store_key": key[:32]})
