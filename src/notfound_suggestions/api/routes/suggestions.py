"""Suggestion job routes: trigger, worker compute and poll."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from notfound_suggestions.api.dependencies import get_suggestion_services
from notfound_suggestions.bootstrap import SuggestionServices
from notfound_suggestions.domain.messages import (
    ComputeOutcome,
    ComputeRequest,
    ComputeResponse,
    PollRequest,
    PollResult,
    PollStatus,
    TriggerRequest,
    TriggerResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/suggestions", tags=["suggestions"])

_POLL_STATUS_CODES = {
    PollStatus.TIMEOUT: 504,
    PollStatus.ERROR: 500,
}


def _client_identifier(request: Request) -> str:
    return "unknown" if request.client is None else request.client.host


def _poll_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=PollResult(status=PollStatus.ERROR, message=message).model_dump(
            mode="json",
            exclude_none=True,
        ),
    )


@router.post(
    "/trigger",
    status_code=202,
    response_model=TriggerResponse,
    responses={429: {"description": "Rate limit exceeded"}},
)
async def trigger_suggestions(
    message: TriggerRequest,
    request: Request,
    services: SuggestionServices = Depends(get_suggestion_services),
) -> JSONResponse:
    """Start a suggestion job for a URL that matched nothing."""

    settings = services.settings
    if await services.rate_limiter.is_limited(
        "trigger",
        _client_identifier(request),
        max_requests=settings.trigger_rate_limit_max_requests,
        window_seconds=settings.trigger_rate_limit_window_seconds,
    ):
        raise HTTPException(status_code=429, detail="Rate limit exceeded")

    triggered = await services.trigger.trigger_job(message.url)
    body = TriggerResponse(
        job_key=triggered.job_key,
        poll_nonce=services.nonce_signer.issue(message.url),
    )
    return JSONResponse(
        status_code=202,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@router.post(
    "/compute",
    response_model=ComputeResponse,
    responses={
        202: {"model": ComputeResponse},
        403: {"description": "Unauthorized"},
        429: {"description": "Rate limit exceeded"},
    },
)
async def compute_suggestions(
    message: ComputeRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    services: SuggestionServices = Depends(get_suggestion_services),
) -> JSONResponse:
    """Worker endpoint; acknowledges a claim and computes after responding.

    Only unauthorized invocations count against the per-client limit.
    """

    decision = await services.coordinator.claim(message.url, message.token)
    if decision.outcome is ComputeOutcome.UNAUTHORIZED:
        settings = services.settings
        if await services.rate_limiter.is_limited(
            "compute",
            _client_identifier(request),
            max_requests=settings.compute_rate_limit_max_requests,
            window_seconds=settings.compute_rate_limit_window_seconds,
        ):
            raise HTTPException(status_code=429, detail="Rate limit exceeded")
        raise HTTPException(status_code=403, detail="Unauthorized")

    status_code = 200
    if decision.outcome is ComputeOutcome.CLAIMED:
        background_tasks.add_task(services.coordinator.run_claimed, decision)
        status_code = 202

    body = ComputeResponse(outcome=decision.outcome)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True),
    )


@router.post(
    "/poll",
    response_model=PollResult,
    responses={
        400: {"model": PollResult},
        403: {"model": PollResult},
        429: {"model": PollResult},
        500: {"model": PollResult},
        504: {"model": PollResult},
    },
)
async def poll_suggestions(
    message: PollRequest,
    request: Request,
    services: SuggestionServices = Depends(get_suggestion_services),
) -> JSONResponse:
    """Report the state of the job for a URL without changing it."""

    settings = services.settings
    if await services.rate_limiter.is_limited(
        "poll",
        _client_identifier(request),
        max_requests=settings.poll_rate_limit_max_requests,
        window_seconds=settings.poll_rate_limit_window_seconds,
    ):
        return _poll_error(429, "Rate limit exceeded. Please try again later.")

    url = message.url.strip()
    if not url:
        return _poll_error(400, "Missing URL parameter")

    if not services.nonce_signer.verify(url, message.nonce):
        logger.debug("Rejected poll with an invalid nonce.")
        return _poll_error(403, "Security check failed")

    result = await services.poller.poll(url)
    return JSONResponse(
        status_code=_POLL_STATUS_CODES.get(result.status, 200),
        content=result.model_dump(mode="json", exclude_none=True),
    )


__all__ = ["router"]
