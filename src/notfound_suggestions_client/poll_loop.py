"""Bounded polling for the result of a suggestion job."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from notfound_suggestions.domain.messages import PollStatus
from notfound_suggestions_client.client import SuggestionPollClient, SuggestionPollClientError
from notfound_suggestions_client.models import (
    FALLBACK_TEXT,
    PollLoopOutcome,
    PollLoopResult,
    PollLoopSettings,
)

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


async def wait_for_suggestions(
    client: SuggestionPollClient,
    url: str,
    nonce: str | None = None,
    settings: PollLoopSettings | None = None,
    *,
    sleep: Sleep = asyncio.sleep,
    fallback_text: str = FALLBACK_TEXT,
) -> PollLoopResult:
    """Poll until the job completes or a budget runs out.

    `pending` answers are retried up to `max_attempts` polls in total.
    `not_found` has its own small budget because the job may not be written
    yet when polling starts. `timeout` and `error` end the loop at once.
    Transport failures are retried with exponential backoff. Every
    non-complete ending yields `fallback_text` instead of suggestions.
    """

    loop_settings = settings or PollLoopSettings()
    attempts = 0
    not_found_count = 0
    transport_failures = 0
    last_status: PollStatus | None = None

    def fallback(reason: str) -> PollLoopResult:
        logger.debug("Giving up on suggestions for '%s': %s", url, reason)
        return PollLoopResult(
            outcome=PollLoopOutcome.FALLBACK,
            html=fallback_text,
            attempts=attempts,
            last_status=last_status,
            reason=reason,
        )

    while attempts < loop_settings.max_attempts:
        attempts += 1
        try:
            response = await client.poll(url, nonce)
        except SuggestionPollClientError as exc:
            transport_failures += 1
            logger.warning("Suggestion poll for '%s' failed: %s", url, exc)
            if transport_failures > loop_settings.transport_retry_limit:
                return fallback("transport failures exhausted the retry budget")
            delay = min(
                loop_settings.interval_seconds * (2**transport_failures),
                loop_settings.retry_max_delay_seconds,
            )
            await sleep(delay)
            continue

        transport_failures = 0
        last_status = response.status

        if response.status is PollStatus.COMPLETE:
            return PollLoopResult(
                outcome=PollLoopOutcome.COMPLETE,
                html=response.html or fallback_text,
                attempts=attempts,
                last_status=last_status,
            )
        if response.status is PollStatus.NOT_FOUND:
            not_found_count += 1
            if not_found_count >= loop_settings.not_found_budget:
                return fallback("job was never found")
        elif response.status is not PollStatus.PENDING:
            return fallback(response.message or f"job ended with status '{response.status}'")

        if attempts < loop_settings.max_attempts:
            await sleep(loop_settings.interval_seconds)

    return fallback("job did not complete within the attempt budget")


__all__ = ["Sleep", "wait_for_suggestions"]
