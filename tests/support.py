"""Test doubles shared by the suggestion job tests."""

from __future__ import annotations

import asyncio
from typing import Any

from notfound_suggestions.domain.suggestions import Suggestion, SuggestionPayload
from notfound_suggestions.infrastructure.stores import InMemoryJobStore

START_TIME = 1_700_000_000


class ManualClock:
    """Clock double that only moves when told to."""

    def __init__(self, now: int = START_TIME) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class RecordingSuggestionEngine:
    """Engine double that records calls and returns a fixed payload."""

    def __init__(self, payload: SuggestionPayload | None = None) -> None:
        self.payload = payload or SuggestionPayload(
            suggestions=[Suggestion(title="About us", url="/about-us/", score=0.9)]
        )
        self.calls: list[dict[str, Any]] = []

    async def compute_suggestions(
        self,
        url_slug: str,
        *,
        include_categories: bool,
        include_tags: bool,
    ) -> SuggestionPayload:
        self.calls.append(
            {
                "url_slug": url_slug,
                "include_categories": include_categories,
                "include_tags": include_tags,
            }
        )
        return self.payload


class FailingSuggestionEngine:
    """Engine double that raises on every call."""

    def __init__(self) -> None:
        self.calls = 0

    async def compute_suggestions(
        self,
        url_slug: str,
        *,
        include_categories: bool,
        include_tags: bool,
    ) -> SuggestionPayload:
        self.calls += 1
        raise RuntimeError(f"matching failed for {url_slug}")


class BlockingSuggestionEngine:
    """Engine double that waits until released, like a slow computation."""

    def __init__(self, payload: SuggestionPayload | None = None) -> None:
        self.payload = payload or SuggestionPayload()
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def compute_suggestions(
        self,
        url_slug: str,
        *,
        include_categories: bool,
        include_tags: bool,
    ) -> SuggestionPayload:
        self.started.set()
        await self.release.wait()
        return self.payload


class PlainJobStore:
    """Store double with only get/set/delete and no conditional writes.

    Expiry is ignored; the stored TTLs are recorded for assertions.
    """

    def __init__(self) -> None:
        self.values: dict[str, Any] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> Any | None:
        return self.values.get(key)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self.values[key] = value
        self.ttls[key] = ttl_seconds

    async def delete(self, key: str) -> None:
        self.values.pop(key, None)
        self.ttls.pop(key, None)


class ContendedJobStore(InMemoryJobStore):
    """In-memory store whose conditional writes lose a scripted number of times.

    The first `lose_after` conditional writes behave normally; the next
    `losses` report a lost race without writing.
    """

    def __init__(self, clock: ManualClock, *, lose_after: int, losses: int) -> None:
        super().__init__(clock=clock)
        self.lose_after = lose_after
        self.losses = losses
        self.conditional_calls = 0
        self.lost = 0

    async def set_if_unchanged(
        self,
        key: str,
        expected: Any,
        value: Any,
        ttl_seconds: int,
    ) -> bool:
        self.conditional_calls += 1
        if self.conditional_calls > self.lose_after and self.lost < self.losses:
            self.lost += 1
            return False
        return await super().set_if_unchanged(key, expected, value, ttl_seconds)


class RecordingDispatcher:
    """Dispatcher double that records invocations without running them."""

    def __init__(self) -> None:
        self.dispatched: list[tuple[str, str]] = []

    async def dispatch(self, url: str, token: str) -> None:
        self.dispatched.append((url, token))
