"""In-memory TTL store for suggestion jobs."""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass
from typing import Any

from notfound_suggestions.domain.clock import Clock, system_clock
from notfound_suggestions.domain.ports import ConditionalJobStore, JobStore, PurgeableJobStore


@dataclass(slots=True)
class _InMemoryEntry:
    value: Any
    expires_at: int


class InMemoryJobStore(JobStore, ConditionalJobStore, PurgeableJobStore):
    """Simple store for local development and tests.

    Values are deep-copied on the way in and out so callers can only change
    stored state through `set`, like with a remote store.
    """

    def __init__(self, clock: Clock = system_clock) -> None:
        self._clock = clock
        self._entries: dict[str, _InMemoryEntry] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any | None:
        """Return live value."""

        async with self._lock:
            entry = self._live_entry_unlocked(key)
            return None if entry is None else copy.deepcopy(entry.value)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store value with expiry."""

        async with self._lock:
            self._set_unlocked(key, value, ttl_seconds)

    async def delete(self, key: str) -> None:
        """Remove value."""

        async with self._lock:
            self._entries.pop(key, None)

    async def set_if_unchanged(
        self,
        key: str,
        expected: Any,
        value: Any,
        ttl_seconds: int,
    ) -> bool:
        """Compare-and-set under the store lock."""

        async with self._lock:
            entry = self._live_entry_unlocked(key)
            current = None if entry is None else entry.value
            if current != expected:
                return False
            self._set_unlocked(key, value, ttl_seconds)
            return True

    async def purge_expired(self) -> int:
        """Drop expired entries and return how many were removed."""

        now = self._clock()
        async with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def _live_entry_unlocked(self, key: str) -> _InMemoryEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry

    def _set_unlocked(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._entries[key] = _InMemoryEntry(
            value=copy.deepcopy(value),
            expires_at=self._clock() + max(ttl_seconds, 1),
        )


__all__ = ["InMemoryJobStore"]
