"""Fixed-window rate limiting kept in the shared job store."""

from __future__ import annotations

import hashlib
import logging

from notfound_suggestions.domain.clock import Clock, system_clock
from notfound_suggestions.domain.ports import JobStore

logger = logging.getLogger(__name__)

_KEY_PREFIX = "ratelimit_"


class StoreBackedRateLimiter:
    """Count requests per action and client in store entries that expire with the window.

    The counter is read-then-written without locking, so concurrent bursts can
    slip a few requests past the limit.
    """

    def __init__(self, store: JobStore, clock: Clock = system_clock) -> None:
        self._store = store
        self._clock = clock

    async def is_limited(
        self,
        action: str,
        identifier: str,
        *,
        max_requests: int,
        window_seconds: int,
    ) -> bool:
        """Record one request and return True when the window is exhausted."""

        key = self._key(action, identifier)
        now = self._clock()
        window = self._window(await self._store.get(key), now)

        if window is None:
            await self._store.set(
                key,
                {"count": 1, "resetsAt": now + window_seconds},
                window_seconds,
            )
            return False

        count, resets_at = window
        if count >= max_requests:
            logger.debug("Rate limit exceeded for action '%s'.", action)
            return True

        # Rewrite with the remaining lifetime so the window never slides.
        await self._store.set(
            key,
            {"count": count + 1, "resetsAt": resets_at},
            max(resets_at - now, 1),
        )
        return False

    def _key(self, action: str, identifier: str) -> str:
        digest = hashlib.sha256(identifier.encode("utf-8")).hexdigest()[:32]
        return f"{_KEY_PREFIX}{action}_{digest}"

    def _window(self, value: object, now: int) -> tuple[int, int] | None:
        if not isinstance(value, dict):
            return None
        count = value.get("count")
        resets_at = value.get("resetsAt")
        if not isinstance(count, int) or not isinstance(resets_at, int):
            return None
        if resets_at <= now:
            return None
        return count, resets_at


__all__ = ["StoreBackedRateLimiter"]
