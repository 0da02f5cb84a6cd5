"""Unit tests for the in-memory key-value store."""

import asyncio
import threading

import pytest

from app.adapters.store.in_memory import InMemoryKeyValueStore
from conftest import FakeClock


@pytest.mark.asyncio
async def test_put_and_get_updates_hit_miss_counters() -> None:
    store = InMemoryKeyValueStore()

    assert await store.get("missing") is None

    await store.put("key", "value", ttl_seconds=10)
    assert await store.get("key") == "value"

    stats = store.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1


@pytest.mark.asyncio
async def test_entry_expires_after_ttl() -> None:
    clock = FakeClock()
    store = InMemoryKeyValueStore(clock=clock)
    await store.put("key", "value", ttl_seconds=5)

    clock.advance(4)
    assert await store.get("key") == "value"

    clock.advance(1)
    assert await store.get("key") is None
    assert store.stats()["evictions"] == 1


@pytest.mark.asyncio
async def test_put_overwrites_value_and_ttl() -> None:
    clock = FakeClock()
    store = InMemoryKeyValueStore(clock=clock)
    await store.put("key", "old", ttl_seconds=5)
    clock.advance(3)
    await store.put("key", "new", ttl_seconds=5)
    clock.advance(3)

    assert await store.get("key") == "new"


@pytest.mark.asyncio
async def test_lru_eviction_removes_least_recently_used() -> None:
    store = InMemoryKeyValueStore(max_entries=2)
    await store.put("a", "1", ttl_seconds=100)
    await store.put("b", "2", ttl_seconds=100)

    # Access "a" so that "b" becomes least recently used
    assert await store.get("a") == "1"

    await store.put("c", "3", ttl_seconds=100)

    assert await store.get("a") == "1"
    assert await store.get("c") == "3"
    assert await store.get("b") is None


@pytest.mark.asyncio
async def test_clear_resets_state() -> None:
    store = InMemoryKeyValueStore()
    await store.put("a", "1", ttl_seconds=10)
    await store.get("a")

    store.clear()

    assert store.stats() == {
        "max_entries": 4096,
        "entries": 0,
        "hits": 0,
        "misses": 0,
        "evictions": 0,
    }


@pytest.mark.asyncio
async def test_invalid_ttl_is_rejected() -> None:
    store = InMemoryKeyValueStore()
    with pytest.raises(ValueError):
        await store.put("a", "1", ttl_seconds=0)


def test_invalid_max_entries_is_rejected() -> None:
    with pytest.raises(ValueError):
        InMemoryKeyValueStore(max_entries=0)


def test_thread_safety_under_concurrent_puts() -> None:
    store = InMemoryKeyValueStore(max_entries=None)
    total_keys = 50

    def _writer(idx: int) -> None:
        asyncio.run(store.put(f"k-{idx}", str(idx), ttl_seconds=30))

    threads = [threading.Thread(target=_writer, args=(i,)) for i in range(total_keys)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.stats()["entries"] == total_keys
