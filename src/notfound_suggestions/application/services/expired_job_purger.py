"""Background cleanup of expired rows in stores that keep them."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from notfound_suggestions.domain.ports import PurgeableJobStore

logger = logging.getLogger(__name__)


class ExpiredJobPurger:
    """Periodically delete expired job and rate-limit entries.

    Reads already ignore expired entries, so the purge only bounds storage.
    """

    def __init__(self, store: PurgeableJobStore, *, interval_seconds: float = 300.0) -> None:
        self._store = store
        self._interval_seconds = max(interval_seconds, 0.01)
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()
        self._lifecycle_lock = asyncio.Lock()

    async def start(self) -> None:
        """Start the purge loop if not already running."""

        async with self._lifecycle_lock:
            task = self._task
            if task is not None and not task.done():
                return

            self._stopping.clear()
            self._task = asyncio.create_task(self._run_loop(), name="expired-job-purger")

    async def stop(self) -> None:
        """Stop the purge loop."""

        async with self._lifecycle_lock:
            task = self._task
            if task is None:
                return
            self._task = None

            self._stopping.set()
            task.cancel()

        with suppress(asyncio.CancelledError):
            await task

    async def purge_once(self) -> int:
        removed = await self._store.purge_expired()
        if removed:
            logger.debug("Purged %s expired store entries.", removed)
        return removed

    async def _run_loop(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.purge_once()
            except Exception:
                logger.exception("Expired job purge failed.")

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self._interval_seconds)
            except TimeoutError:
                pass


__all__ = ["ExpiredJobPurger"]
