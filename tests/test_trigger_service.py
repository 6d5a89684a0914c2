from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from notfound_suggestions.application.services import (
    SuggestionJobPolicy,
    SuggestionTriggerService,
)
from notfound_suggestions.domain.errors import WorkerDispatchError
from notfound_suggestions.domain.job_keys import derive_job_key
from notfound_suggestions.domain.suggestion_jobs import SuggestionJob
from notfound_suggestions.domain.suggestions import Suggestion, SuggestionPayload
from notfound_suggestions.infrastructure.stores import InMemoryJobStore
from tests.support import ManualClock, PlainJobStore, RecordingDispatcher

POLICY = SuggestionJobPolicy()
URL = "/old-page"
KEY = derive_job_key(URL)


class RejectingDispatcher:
    """Dispatcher double whose invocations never leave the process."""

    async def dispatch(self, url: str, token: str) -> None:
        raise WorkerDispatchError("Worker dispatcher is stopped.")


class CallbackAwareDispatcher(RecordingDispatcher):
    """Dispatcher double that reports undelivered invocations on demand."""

    def __init__(self) -> None:
        super().__init__()
        self.callback: Callable[[str, str], Awaitable[None]] | None = None

    def set_undelivered_callback(
        self,
        callback: Callable[[str, str], Awaitable[None]] | None,
    ) -> None:
        self.callback = callback


def test_trigger_is_idempotent_while_record_is_live() -> None:
    clock = ManualClock()
    store = InMemoryJobStore(clock=clock)
    dispatcher = RecordingDispatcher()
    service = SuggestionTriggerService(store, dispatcher, POLICY, clock=clock)

    async def scenario() -> tuple[str, str]:
        first = await service.trigger(URL)
        clock.advance(5)
        second = await service.trigger(URL + "?utm_source=mail")
        return first, second

    first, second = asyncio.run(scenario())

    assert first == second
    assert len(first) == 32
    assert dispatcher.dispatched == [(URL, first)]


def test_trigger_after_expiry_creates_a_new_job() -> None:
    clock = ManualClock()
    store = InMemoryJobStore(clock=clock)
    dispatcher = RecordingDispatcher()
    service = SuggestionTriggerService(store, dispatcher, POLICY, clock=clock)

    async def scenario() -> tuple[str, str]:
        first = await service.trigger(URL)
        clock.advance(POLICY.job_ttl_seconds)
        return first, await service.trigger(URL)

    first, second = asyncio.run(scenario())

    assert first != second
    assert len(dispatcher.dispatched) == 2


def test_trigger_job_reports_creation_and_key() -> None:
    store = PlainJobStore()
    tokens = iter(["token-a", "token-b"])
    service = SuggestionTriggerService(
        store,
        RecordingDispatcher(),
        POLICY,
        token_factory=lambda: next(tokens),
    )

    async def scenario() -> None:
        created = await service.trigger_job(URL)
        repeated = await service.trigger_job(URL)
        assert (created.job_key, created.token, created.created) == (KEY, "token-a", True)
        assert (repeated.job_key, repeated.token, repeated.created) == (KEY, "token-a", False)
        assert store.ttls[KEY] == POLICY.job_ttl_seconds

    asyncio.run(scenario())


def test_trigger_returns_empty_token_for_cached_completion() -> None:
    clock = ManualClock()
    store = InMemoryJobStore(clock=clock)
    dispatcher = RecordingDispatcher()
    service = SuggestionTriggerService(store, dispatcher, POLICY, clock=clock)
    payload = SuggestionPayload(suggestions=[Suggestion(title="Home", url="/")])

    async def scenario() -> None:
        assert await service.cache_completed(URL, payload) is True
        assert await service.cache_completed(URL, SuggestionPayload()) is False
        assert await service.trigger(URL) == ""
        record = await store.get(KEY)
        assert SuggestionJob.from_store_value(record).suggestions == payload

    asyncio.run(scenario())
    assert dispatcher.dispatched == []


def test_cached_completion_expires_after_its_own_ttl() -> None:
    clock = ManualClock()
    store = InMemoryJobStore(clock=clock)
    service = SuggestionTriggerService(store, RecordingDispatcher(), POLICY, clock=clock)

    async def scenario() -> None:
        await service.cache_completed(URL, SuggestionPayload())
        clock.advance(POLICY.cached_completion_ttl_seconds - 1)
        assert await store.get(KEY) is not None
        clock.advance(1)
        assert await store.get(KEY) is None

    asyncio.run(scenario())


def test_rejected_dispatch_releases_the_job() -> None:
    store = PlainJobStore()
    service = SuggestionTriggerService(store, RejectingDispatcher(), POLICY)

    async def scenario() -> str:
        return await service.trigger(URL)

    token = asyncio.run(scenario())

    assert token
    assert store.values == {}


def test_undelivered_callback_only_releases_the_same_unclaimed_job() -> None:
    clock = ManualClock()
    store = InMemoryJobStore(clock=clock)
    dispatcher = CallbackAwareDispatcher()
    service = SuggestionTriggerService(store, dispatcher, POLICY, clock=clock)
    release = dispatcher.callback
    assert release is not None

    async def scenario() -> None:
        token = await service.trigger(URL)

        await release(URL, "other-token")
        assert await store.get(KEY) is not None

        claimed = SuggestionJob.pending(URL, token).claimed(clock.now).to_store_value()
        await store.set(KEY, claimed, POLICY.job_ttl_seconds)
        await release(URL, token)
        assert await store.get(KEY) == claimed

        await store.set(KEY, SuggestionJob.pending(URL, token).to_store_value(), 120)
        await release(URL, token)
        assert await store.get(KEY) is None

    asyncio.run(scenario())
