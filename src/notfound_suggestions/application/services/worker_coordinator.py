"""Authorization, claim and completion of suggestion computations."""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass

from notfound_suggestions.application.services.crash_guard import (
    ComputationCrashGuard,
    CrashGuardRegistry,
)
from notfound_suggestions.application.services.job_policy import SuggestionJobPolicy
from notfound_suggestions.application.services.job_records import SuggestionJobRecords
from notfound_suggestions.domain.clock import Clock, system_clock
from notfound_suggestions.domain.errors import JobRecordFormatError
from notfound_suggestions.domain.job_keys import derive_job_key
from notfound_suggestions.domain.messages import ComputeOutcome
from notfound_suggestions.domain.ports import JobStore, SuggestionEngine
from notfound_suggestions.domain.suggestion_jobs import (
    SuggestionJob,
    SuggestionJobStatus,
    stored_status,
    stored_token,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ClaimDecision:
    """Result of the authorization gate and claim-or-skip step."""

    outcome: ComputeOutcome
    job_key: str
    job: SuggestionJob | None = None
    recovered: bool = False


class WorkerCoordinator:
    """Run at most one live computation per job and record how it ended.

    Every invocation walks the same gate: the stored token must match, a
    `complete` record is never touched, and a claimed job is only taken over
    once its claim is older than the recovery threshold.
    """

    def __init__(
        self,
        store: JobStore,
        engine: SuggestionEngine,
        policy: SuggestionJobPolicy,
        *,
        site_base_path: str = "",
        include_categories: bool = True,
        include_tags: bool = True,
        clock: Clock = system_clock,
        crash_guards: CrashGuardRegistry | None = None,
    ) -> None:
        self._records = SuggestionJobRecords(store)
        self._store = store
        self._engine = engine
        self._policy = policy
        self._site_base_path = site_base_path.strip().rstrip("/")
        self._include_categories = include_categories
        self._include_tags = include_tags
        self._clock = clock
        self._crash_guards = crash_guards or CrashGuardRegistry()

    @property
    def crash_guards(self) -> CrashGuardRegistry:
        return self._crash_guards

    async def handle(self, url: str, provided_token: str) -> ComputeOutcome:
        """Process one worker invocation end to end."""

        decision = await self.claim(url, provided_token)
        if decision.outcome is not ComputeOutcome.CLAIMED:
            return decision.outcome
        return await self.run_claimed(decision)

    async def claim(self, url: str, provided_token: str) -> ClaimDecision:
        """Authorize the invocation and claim the job when allowed.

        `url` is the normalized URL the trigger dispatched; it is not
        normalized again.
        """

        job_key = derive_job_key(url)
        current = await self._store.get(job_key)

        expected_token = stored_token(current)
        if expected_token is None:
            logger.debug("Rejected worker invocation for job %s: no job or no token.", job_key)
            return ClaimDecision(ComputeOutcome.UNAUTHORIZED, job_key)

        if stored_status(current) == SuggestionJobStatus.COMPLETE:
            logger.debug("Job %s is already complete.", job_key)
            return ClaimDecision(ComputeOutcome.ALREADY_COMPLETE, job_key)

        if not provided_token or not hmac.compare_digest(
            provided_token.encode("utf-8"),
            expected_token.encode("utf-8"),
        ):
            logger.debug("Rejected worker invocation for job %s: token mismatch.", job_key)
            return ClaimDecision(ComputeOutcome.UNAUTHORIZED, job_key)

        try:
            job = SuggestionJob.from_store_value(current)
        except JobRecordFormatError as exc:
            logger.error("Job %s holds an invalid record: %s", job_key, exc)
            return ClaimDecision(ComputeOutcome.INVALID_RECORD, job_key)

        if job.status is SuggestionJobStatus.ERROR:
            logger.debug("Job %s already failed; leaving the error marker in place.", job_key)
            return ClaimDecision(ComputeOutcome.ALREADY_FAILED, job_key)

        now = self._clock()
        recovered = False
        if job.is_claimed:
            elapsed = now - job.started
            if elapsed < self._policy.recovery_threshold_seconds:
                logger.debug("Job %s is being computed (claimed %ss ago).", job_key, elapsed)
                return ClaimDecision(ComputeOutcome.SKIPPED, job_key)
            logger.warning(
                "Taking over job %s for '%s'; previous claim is %ss old.",
                job_key,
                job.url,
                elapsed,
            )
            recovered = True

        claimed = job.claimed(now)
        if not await self._records.replace(
            job_key,
            current,
            claimed,
            self._policy.job_ttl_seconds,
        ):
            logger.debug("Another worker claimed job %s first.", job_key)
            return ClaimDecision(ComputeOutcome.SKIPPED, job_key)

        return ClaimDecision(ComputeOutcome.CLAIMED, job_key, claimed, recovered)

    async def run_claimed(self, decision: ClaimDecision) -> ComputeOutcome:
        """Compute suggestions for a claimed job and write the terminal record.

        A result that cannot be written because other writers keep winning
        counts as a failure, so the crash guard fires.
        """

        job = decision.job
        if decision.outcome is not ComputeOutcome.CLAIMED or job is None:
            raise ValueError("run_claimed requires a CLAIMED decision.")

        guard = ComputationCrashGuard(
            self._records,
            decision.job_key,
            job,
            error_ttl_seconds=self._policy.error_ttl_seconds,
            registry=self._crash_guards,
        )
        try:
            async with guard:
                payload = await self._engine.compute_suggestions(
                    self.url_slug(job.url),
                    include_categories=self._include_categories,
                    include_tags=self._include_tags,
                )
                written = await self._records.write_unless_complete(
                    decision.job_key,
                    job.completed_with(payload, self._clock()),
                    self._policy.job_ttl_seconds,
                )
                guard.disarm()
        except Exception:
            return ComputeOutcome.FAILED

        if not written:
            logger.info("Job %s was completed elsewhere; result discarded.", decision.job_key)
            return ComputeOutcome.ALREADY_COMPLETE

        logger.info(
            "Computed %s suggestions for '%s' (job %s).",
            len(payload.suggestions),
            job.url,
            decision.job_key,
        )
        return ComputeOutcome.COMPLETED

    def url_slug(self, url: str) -> str:
        """Return the part of `url` the engine matches against."""

        slug = url
        base = self._site_base_path
        if base and slug.lower().startswith(base.lower()):
            slug = slug[len(base) :]
        return slug or "/"


__all__ = ["ClaimDecision", "WorkerCoordinator"]
