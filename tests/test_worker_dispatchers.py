from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from notfound_suggestions.domain.errors import WorkerDispatchError
from notfound_suggestions.infrastructure.dispatch import (
    HttpWorkerDispatcher,
    InProcessWorkerDispatcher,
)

ENDPOINT = "https://suggestions.example.com/api/suggestions/compute"


def test_http_dispatch_posts_url_and_token_in_background() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code=202, json={"outcome": "claimed"})

    dispatcher = HttpWorkerDispatcher(ENDPOINT, transport=httpx.MockTransport(handler))

    async def scenario() -> None:
        await dispatcher.start()
        await dispatcher.dispatch("/old-page", "T1")
        await dispatcher.stop()

    asyncio.run(scenario())

    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert str(requests[0].url) == ENDPOINT
    assert json.loads(requests[0].content.decode()) == {"url": "/old-page", "token": "T1"}


def test_http_dispatch_reports_connection_failures_as_undelivered() -> None:
    undelivered: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def on_undelivered(url: str, token: str) -> None:
        undelivered.append((url, token))

    dispatcher = HttpWorkerDispatcher(ENDPOINT, transport=httpx.MockTransport(handler))
    dispatcher.set_undelivered_callback(on_undelivered)

    async def scenario() -> None:
        await dispatcher.dispatch("/old-page", "T1")
        await dispatcher.stop()

    asyncio.run(scenario())

    assert undelivered == [("/old-page", "T1")]


@pytest.mark.parametrize("failure", ["read_timeout", "server_error"])
def test_http_dispatch_does_not_release_jobs_that_reached_the_worker(failure: str) -> None:
    undelivered: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if failure == "read_timeout":
            raise httpx.ReadTimeout("slow worker", request=request)
        return httpx.Response(status_code=500)

    async def on_undelivered(url: str, token: str) -> None:
        undelivered.append((url, token))

    dispatcher = HttpWorkerDispatcher(ENDPOINT, transport=httpx.MockTransport(handler))
    dispatcher.set_undelivered_callback(on_undelivered)

    async def scenario() -> None:
        await dispatcher.dispatch("/old-page", "T1")
        await dispatcher.stop()

    asyncio.run(scenario())

    assert undelivered == []


def test_http_dispatch_after_stop_is_rejected() -> None:
    dispatcher = HttpWorkerDispatcher(
        ENDPOINT,
        transport=httpx.MockTransport(lambda _: httpx.Response(status_code=202)),
    )

    async def scenario() -> None:
        await dispatcher.stop()
        with pytest.raises(WorkerDispatchError):
            await dispatcher.dispatch("/old-page", "T1")

    asyncio.run(scenario())


def test_http_dispatcher_rejects_empty_endpoint() -> None:
    with pytest.raises(ValueError):
        HttpWorkerDispatcher("  ")


def test_in_process_dispatch_runs_handler_as_task() -> None:
    calls: list[tuple[str, str]] = []

    async def handler(url: str, token: str) -> None:
        calls.append((url, token))

    dispatcher = InProcessWorkerDispatcher(handler)

    async def scenario() -> None:
        await dispatcher.dispatch("/old-page", "T1")
        assert calls == []
        await dispatcher.wait_idle()

    asyncio.run(scenario())

    assert calls == [("/old-page", "T1")]


def test_in_process_stop_cancels_running_invocations() -> None:
    cancelled = False

    async def handler(url: str, token: str) -> None:
        nonlocal cancelled
        try:
            await asyncio.sleep(3600)
        except asyncio.CancelledError:
            cancelled = True
            raise

    dispatcher = InProcessWorkerDispatcher(handler)

    async def scenario() -> None:
        await dispatcher.dispatch("/old-page", "T1")
        await asyncio.sleep(0)
        await dispatcher.stop()
        with pytest.raises(WorkerDispatchError):
            await dispatcher.dispatch("/old-page", "T1")

    asyncio.run(scenario())

    assert cancelled is True
