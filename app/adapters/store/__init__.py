"""Key-value store adapters.

Both the rate limiter counters and the cached resource payloads live behind
this interface so the in-memory store can later be replaced by a shared one
(e.g. Redis) without touching the limiter or the gateway.
"""

from app.adapters.store.base import AbstractKeyValueStore
from app.adapters.store.in_memory import InMemoryKeyValueStore

__all__ = [
    "AbstractKeyValueStore",
    "InMemoryKeyValueStore",
]
