"""Read-only view of suggestion jobs for pollers."""

from __future__ import annotations

import logging

from notfound_suggestions.application.services.job_policy import SuggestionJobPolicy
from notfound_suggestions.domain.clock import Clock, system_clock
from notfound_suggestions.domain.errors import JobRecordFormatError
from notfound_suggestions.domain.job_keys import derive_job_key, normalize_url_for_cache_key
from notfound_suggestions.domain.messages import PollResult, PollStatus
from notfound_suggestions.domain.ports import JobStore, SuggestionRenderer
from notfound_suggestions.domain.suggestion_jobs import SuggestionJob, SuggestionJobStatus
from notfound_suggestions.domain.suggestions import SuggestionPayload

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Computation timed out"
FAILURE_MESSAGE = "Suggestion computation failed"
INVALID_RECORD_MESSAGE = "Invalid suggestion data"


class SuggestionPollService:
    """Map the stored record of a URL to a poll answer without writing."""

    def __init__(
        self,
        store: JobStore,
        renderer: SuggestionRenderer,
        policy: SuggestionJobPolicy,
        *,
        clock: Clock = system_clock,
    ) -> None:
        self._store = store
        self._renderer = renderer
        self._policy = policy
        self._clock = clock

    async def poll(self, url: str) -> PollResult:
        normalized_url = normalize_url_for_cache_key(url)
        job_key = derive_job_key(normalized_url)

        current = await self._store.get(job_key)
        if current is None:
            return PollResult(status=PollStatus.NOT_FOUND)

        try:
            job = SuggestionJob.from_store_value(current)
        except JobRecordFormatError as exc:
            logger.error("Job %s holds an invalid record: %s", job_key, exc)
            return PollResult(status=PollStatus.ERROR, message=INVALID_RECORD_MESSAGE)

        if job.status is SuggestionJobStatus.PENDING:
            if job.is_claimed:
                elapsed = self._clock() - job.started
                if elapsed > self._policy.recovery_threshold_seconds:
                    logger.debug("Job %s has been running for %ss.", job_key, elapsed)
                    return PollResult(status=PollStatus.TIMEOUT, message=TIMEOUT_MESSAGE)
            return PollResult(status=PollStatus.PENDING)

        if job.status is SuggestionJobStatus.ERROR:
            return PollResult(status=PollStatus.ERROR, message=FAILURE_MESSAGE)

        payload = job.suggestions or SuggestionPayload()
        return PollResult(
            status=PollStatus.COMPLETE,
            html=self._renderer.render(payload, normalized_url),
        )


__all__ = [
    "FAILURE_MESSAGE",
    "INVALID_RECORD_MESSAGE",
    "SuggestionPollService",
    "TIMEOUT_MESSAGE",
]
