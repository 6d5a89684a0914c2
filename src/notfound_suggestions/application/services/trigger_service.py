"""Idempotent creation of suggestion jobs."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from notfound_suggestions.application.services.job_policy import SuggestionJobPolicy
from notfound_suggestions.application.services.job_records import SuggestionJobRecords
from notfound_suggestions.domain.clock import Clock, system_clock
from notfound_suggestions.domain.errors import JobRecordFormatError, WorkerDispatchError
from notfound_suggestions.domain.job_keys import derive_job_key, normalize_url_for_cache_key
from notfound_suggestions.domain.ports import JobStore, WorkerDispatcher
from notfound_suggestions.domain.suggestion_jobs import (
    SuggestionJob,
    SuggestionJobStatus,
    stored_token,
)
from notfound_suggestions.domain.suggestions import SuggestionPayload

logger = logging.getLogger(__name__)

TOKEN_BYTES = 16


def new_compute_token() -> str:
    """Return an unguessable 32-character hex token."""

    return secrets.token_hex(TOKEN_BYTES)


@runtime_checkable
class _UndeliveredCallbackAwareDispatcher(Protocol):
    def set_undelivered_callback(
        self,
        callback: Callable[[str, str], Awaitable[None]] | None,
    ) -> None:
        """Register callback for invocations that never reached a worker."""


@dataclass(slots=True, frozen=True)
class TriggeredJob:
    """Result of one trigger call."""

    job_key: str
    token: str
    created: bool


class SuggestionTriggerService:
    """Create at most one live job per URL and hand it to a worker."""

    def __init__(
        self,
        store: JobStore,
        dispatcher: WorkerDispatcher,
        policy: SuggestionJobPolicy,
        *,
        clock: Clock = system_clock,
        token_factory: Callable[[], str] = new_compute_token,
    ) -> None:
        self._store = store
        self._records = SuggestionJobRecords(store)
        self._dispatcher = dispatcher
        self._policy = policy
        self._clock = clock
        self._token_factory = token_factory

        if isinstance(dispatcher, _UndeliveredCallbackAwareDispatcher):
            dispatcher.set_undelivered_callback(self.release_undelivered_job)

    async def trigger(self, url: str) -> str:
        """Ensure a job exists for `url` and return its compute token.

        A repeated call while a record is live returns the stored token and
        dispatches nothing. A cached completion carries no token, so `""` is
        returned for it.
        """

        return (await self.trigger_job(url)).token

    async def trigger_job(self, url: str) -> TriggeredJob:
        normalized_url = normalize_url_for_cache_key(url)
        job_key = derive_job_key(normalized_url)

        existing = await self._store.get(job_key)
        if existing is not None:
            logger.debug("Suggestion job %s already exists; not triggering again.", job_key)
            return TriggeredJob(job_key=job_key, token=stored_token(existing) or "", created=False)

        token = self._token_factory()
        job = SuggestionJob.pending(normalized_url, token)
        if not await self._records.create(job_key, job, self._policy.job_ttl_seconds):
            winner = await self._store.get(job_key)
            logger.debug("Suggestion job %s was created concurrently.", job_key)
            return TriggeredJob(job_key=job_key, token=stored_token(winner) or "", created=False)

        logger.debug(
            "Triggering suggestion computation for '%s' (job %s).",
            normalized_url,
            job_key,
        )
        try:
            await self._dispatcher.dispatch(normalized_url, token)
        except WorkerDispatchError as exc:
            logger.warning(
                "Suggestion worker for '%s' was not dispatched: %s",
                normalized_url,
                exc,
            )
            await self.release_undelivered_job(normalized_url, token)
        except Exception:
            logger.exception("Failed to dispatch suggestion worker for '%s'.", normalized_url)
            await self.release_undelivered_job(normalized_url, token)

        return TriggeredJob(job_key=job_key, token=token, created=True)

    async def release_undelivered_job(self, url: str, token: str) -> None:
        """Delete a job whose worker invocation never arrived.

        Only the same unclaimed job is removed; a claimed or replaced record
        is left alone.
        """

        job_key = derive_job_key(url)
        current = await self._store.get(job_key)
        if current is None or stored_token(current) != token:
            return

        try:
            job = SuggestionJob.from_store_value(current)
        except JobRecordFormatError:
            return
        if job.status is not SuggestionJobStatus.PENDING or job.is_claimed:
            return

        await self._store.delete(job_key)
        logger.info(
            "Released suggestion job %s for '%s'; the worker invocation was not delivered.",
            job_key,
            url,
        )

    async def cache_completed(self, url: str, payload: SuggestionPayload) -> bool:
        """Store suggestions computed outside a worker if no job exists yet."""

        normalized_url = normalize_url_for_cache_key(url)
        job_key = derive_job_key(normalized_url)
        job = SuggestionJob.cached(normalized_url, payload, self._clock())
        created = await self._records.create(
            job_key,
            job,
            self._policy.cached_completion_ttl_seconds,
        )
        if created:
            logger.debug(
                "Cached %s suggestions for '%s'.",
                len(payload.suggestions),
                normalized_url,
            )
        return created


__all__ = ["SuggestionTriggerService", "TriggeredJob", "new_compute_token"]
