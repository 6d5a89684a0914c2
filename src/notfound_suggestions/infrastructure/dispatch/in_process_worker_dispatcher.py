"""Worker dispatch that runs the coordinator as a local asyncio task."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import suppress

from notfound_suggestions.domain.errors import WorkerDispatchError
from notfound_suggestions.domain.ports import WorkerDispatcher

logger = logging.getLogger(__name__)


class InProcessWorkerDispatcher(WorkerDispatcher):
    """Schedule worker invocations on the running event loop.

    Used when no public URL is configured, so the service cannot call its
    own worker endpoint.
    """

    def __init__(self, handler: Callable[[str, str], Awaitable[object]]) -> None:
        self._handler = handler
        self._tasks: set[asyncio.Task[None]] = set()
        self._stopped = False

    async def start(self) -> None:
        self._stopped = False

    async def stop(self) -> None:
        """Cancel in-flight computations so their crash guards fire."""

        self._stopped = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with suppress(asyncio.CancelledError):
                await task

    async def dispatch(self, url: str, token: str) -> None:
        if self._stopped:
            raise WorkerDispatchError("Worker dispatcher is stopped.")
        task = asyncio.create_task(
            self._run(url, token),
            name="suggestion-worker-in-process",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        """Wait until every scheduled invocation has finished."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(self, url: str, token: str) -> None:
        try:
            await self._handler(url, token)
        except Exception:
            logger.exception("In-process suggestion worker failed for '%s'.", url)


__all__ = ["InProcessWorkerDispatcher"]
