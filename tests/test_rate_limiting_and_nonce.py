from __future__ import annotations

import asyncio

from notfound_suggestions.domain.poll_nonce import PollNonceSigner
from notfound_suggestions.infrastructure.rate_limiting import StoreBackedRateLimiter
from notfound_suggestions.infrastructure.stores import InMemoryJobStore
from tests.support import ManualClock


def test_rate_limiter_trips_after_max_requests() -> None:
    clock = ManualClock()
    limiter = StoreBackedRateLimiter(InMemoryJobStore(clock=clock), clock=clock)

    async def scenario() -> list[bool]:
        return [
            await limiter.is_limited("poll", "10.0.0.1", max_requests=3, window_seconds=60)
            for _ in range(4)
        ]

    assert asyncio.run(scenario()) == [False, False, False, True]


def test_rate_limiter_window_does_not_slide() -> None:
    clock = ManualClock()
    limiter = StoreBackedRateLimiter(InMemoryJobStore(clock=clock), clock=clock)

    async def scenario() -> None:
        assert not await limiter.is_limited("poll", "ip", max_requests=2, window_seconds=60)
        clock.advance(50)
        assert not await limiter.is_limited("poll", "ip", max_requests=2, window_seconds=60)
        assert await limiter.is_limited("poll", "ip", max_requests=2, window_seconds=60)
        clock.advance(10)
        assert not await limiter.is_limited("poll", "ip", max_requests=2, window_seconds=60)

    asyncio.run(scenario())


def test_rate_limiter_counts_actions_and_clients_separately() -> None:
    clock = ManualClock()
    limiter = StoreBackedRateLimiter(InMemoryJobStore(clock=clock), clock=clock)

    async def scenario() -> None:
        assert not await limiter.is_limited("poll", "a", max_requests=1, window_seconds=60)
        assert await limiter.is_limited("poll", "a", max_requests=1, window_seconds=60)
        assert not await limiter.is_limited("poll", "b", max_requests=1, window_seconds=60)
        assert not await limiter.is_limited("compute", "a", max_requests=1, window_seconds=60)

    asyncio.run(scenario())


def test_poll_nonce_verifies_for_issued_url_only() -> None:
    clock = ManualClock()
    signer = PollNonceSigner("secret", lifetime_seconds=60, clock=clock)

    nonce = signer.issue("/old-page/")

    assert nonce is not None
    assert signer.verify("/old-page/", nonce) is True
    assert signer.verify("/old-page/?ref=x", nonce) is True
    assert signer.verify("/other-page/", nonce) is False
    assert signer.verify("/old-page/", None) is False
    assert signer.verify("/old-page/", "garbage") is False


def test_poll_nonce_expires() -> None:
    clock = ManualClock()
    signer = PollNonceSigner("secret", lifetime_seconds=60, clock=clock)
    nonce = signer.issue("/old-page/")

    clock.advance(61)

    assert signer.verify("/old-page/", nonce) is False


def test_poll_nonce_signed_with_other_secret_is_rejected() -> None:
    clock = ManualClock()
    nonce = PollNonceSigner("other", clock=clock).issue("/old-page/")

    assert PollNonceSigner("secret", clock=clock).verify("/old-page/", nonce) is False


def test_disabled_signer_issues_nothing_and_accepts_everything() -> None:
    signer = PollNonceSigner(None)

    assert signer.enabled is False
    assert signer.issue("/old-page/") is None
    assert signer.verify("/old-page/", None) is True
