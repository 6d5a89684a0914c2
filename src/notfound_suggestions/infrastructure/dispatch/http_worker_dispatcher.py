"""Fire-and-forget HTTP invocation of the worker endpoint."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from notfound_suggestions.domain.errors import WorkerDispatchError
from notfound_suggestions.domain.ports import WorkerDispatcher

logger = logging.getLogger(__name__)

UndeliveredCallback = Callable[[str, str], Awaitable[None]]


class HttpWorkerDispatcher(WorkerDispatcher):
    """POST `{url, token}` to the compute endpoint from a background task.

    Only connection-level failures count as undelivered: once the request
    reached the server, a worker may be running even if no answer arrives
    before the timeout.
    """

    def __init__(
        self,
        compute_endpoint: str,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        normalized = compute_endpoint.strip()
        if not normalized:
            raise ValueError("Compute endpoint cannot be empty.")
        self._compute_endpoint = normalized
        self._timeout_seconds = max(timeout_seconds, 0.1)
        self._transport = transport
        self._http: httpx.AsyncClient | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._undelivered_callback: UndeliveredCallback | None = None
        self._stopped = False

    @property
    def compute_endpoint(self) -> str:
        return self._compute_endpoint

    def set_undelivered_callback(self, callback: UndeliveredCallback | None) -> None:
        """Register the hook invoked when a dispatch never reached a worker."""

        self._undelivered_callback = callback

    async def start(self) -> None:
        """Open the shared HTTP client."""

        self._stopped = False
        self._client()

    async def stop(self) -> None:
        """Wait for in-flight dispatches and release HTTP resources."""

        self._stopped = True
        tasks = list(self._tasks)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        client = self._http
        self._http = None
        if client is not None:
            await client.aclose()

    async def dispatch(self, url: str, token: str) -> None:
        """Schedule delivery and return immediately."""

        if self._stopped:
            raise WorkerDispatchError("Worker dispatcher is stopped.")
        task = asyncio.create_task(
            self._deliver(url, token),
            name="suggestion-worker-dispatch",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, url: str, token: str) -> None:
        client = self._client()
        try:
            response = await client.post(
                self._compute_endpoint,
                json={"url": url, "token": token},
            )
        except (httpx.ConnectError, httpx.ConnectTimeout) as exc:
            logger.warning(
                "Suggestion worker dispatch for '%s' was not delivered: %s",
                url,
                exc,
            )
            await self._notify_undelivered(url, token)
            return
        except httpx.TimeoutException:
            logger.debug("Suggestion worker for '%s' did not answer before timeout.", url)
            return
        except httpx.HTTPError as exc:
            logger.warning("Suggestion worker dispatch for '%s' failed: %s", url, exc)
            return

        if not response.is_success:
            logger.warning(
                "Suggestion worker rejected dispatch for '%s': %s",
                url,
                response.status_code,
            )

    async def _notify_undelivered(self, url: str, token: str) -> None:
        callback = self._undelivered_callback
        if callback is None:
            return
        try:
            await callback(url, token)
        except Exception:
            logger.exception("Undelivered-dispatch callback failed for '%s'.", url)

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                timeout=self._timeout_seconds,
                transport=self._transport,
            )
        return self._http


__all__ = ["HttpWorkerDispatcher", "UndeliveredCallback"]
