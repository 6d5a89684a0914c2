from __future__ import annotations

import asyncio

from notfound_suggestions.domain.ports import ConditionalJobStore, PurgeableJobStore
from notfound_suggestions.infrastructure.stores import InMemoryJobStore
from tests.support import ManualClock


def test_entries_expire_after_ttl() -> None:
    clock = ManualClock()
    store = InMemoryJobStore(clock=clock)

    async def scenario() -> None:
        await store.set("key", {"status": "pending"}, ttl_seconds=120)
        clock.advance(119)
        assert await store.get("key") == {"status": "pending"}
        clock.advance(1)
        assert await store.get("key") is None

    asyncio.run(scenario())


def test_values_are_copied_in_and_out() -> None:
    store = InMemoryJobStore(clock=ManualClock())

    async def scenario() -> None:
        value = {"status": "pending", "started": 0}
        await store.set("key", value, ttl_seconds=60)
        value["started"] = 5
        read = await store.get("key")
        assert read == {"status": "pending", "started": 0}
        read["started"] = 7
        assert await store.get("key") == {"status": "pending", "started": 0}

    asyncio.run(scenario())


def test_set_if_unchanged_allows_a_single_winner() -> None:
    store = InMemoryJobStore(clock=ManualClock())

    async def scenario() -> None:
        original = {"status": "pending", "token": "t", "started": 0}
        await store.set("key", original, ttl_seconds=60)

        first = await store.set_if_unchanged("key", original, {"started": 1}, 60)
        second = await store.set_if_unchanged("key", original, {"started": 2}, 60)

        assert first is True
        assert second is False
        assert await store.get("key") == {"started": 1}

    asyncio.run(scenario())


def test_set_if_unchanged_with_none_creates_only_when_absent_or_expired() -> None:
    clock = ManualClock()
    store = InMemoryJobStore(clock=clock)

    async def scenario() -> None:
        assert await store.set_if_unchanged("key", None, {"n": 1}, 10) is True
        assert await store.set_if_unchanged("key", None, {"n": 2}, 10) is False
        clock.advance(10)
        assert await store.set_if_unchanged("key", None, {"n": 3}, 10) is True
        assert await store.get("key") == {"n": 3}

    asyncio.run(scenario())


def test_purge_expired_removes_only_expired_entries() -> None:
    clock = ManualClock()
    store = InMemoryJobStore(clock=clock)

    async def scenario() -> None:
        await store.set("short", 1, ttl_seconds=5)
        await store.set("long", 2, ttl_seconds=50)
        clock.advance(5)
        assert await store.purge_expired() == 1
        assert await store.get("long") == 2

    asyncio.run(scenario())


def test_delete_is_idempotent() -> None:
    store = InMemoryJobStore(clock=ManualClock())

    async def scenario() -> None:
        await store.set("key", 1, ttl_seconds=5)
        await store.delete("key")
        await store.delete("key")
        assert await store.get("key") is None

    asyncio.run(scenario())


def test_in_memory_store_offers_optional_capabilities() -> None:
    store = InMemoryJobStore()

    assert isinstance(store, ConditionalJobStore)
    assert isinstance(store, PurgeableJobStore)
