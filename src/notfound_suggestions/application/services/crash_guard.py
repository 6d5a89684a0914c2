"""Fatal-termination hook for in-flight suggestion computations."""

from __future__ import annotations

import logging
from types import TracebackType

from notfound_suggestions.application.services.job_records import SuggestionJobRecords
from notfound_suggestions.domain.suggestion_jobs import SuggestionJob

logger = logging.getLogger(__name__)


class CrashGuardRegistry:
    """Track armed guards so service shutdown can fire them."""

    def __init__(self) -> None:
        self._guards: set[ComputationCrashGuard] = set()

    @property
    def active_count(self) -> int:
        return len(self._guards)

    def register(self, guard: ComputationCrashGuard) -> None:
        self._guards.add(guard)

    def unregister(self, guard: ComputationCrashGuard) -> None:
        self._guards.discard(guard)

    async def fire_all(self, reason: str) -> int:
        """Fire every armed guard and return how many wrote an error marker."""

        fired = 0
        for guard in list(self._guards):
            if await guard.fire(reason):
                fired += 1
        return fired


class ComputationCrashGuard:
    """Write the `error` marker if a claimed computation dies.

    The guard is an async context manager entered right after a successful
    claim. It fires at most once: on an exception or cancellation escaping the
    block, or when the registry fires it during shutdown. `disarm` is called
    after the result has been written, so a failure past that point no longer
    touches the record. An already `complete` record is never overwritten.
    """

    def __init__(
        self,
        records: SuggestionJobRecords,
        job_key: str,
        job: SuggestionJob,
        *,
        error_ttl_seconds: int,
        registry: CrashGuardRegistry | None = None,
    ) -> None:
        self._records = records
        self._job_key = job_key
        self._job = job
        self._error_ttl_seconds = error_ttl_seconds
        self._registry = registry
        self._armed = True
        self._fired = False

    @property
    def job_key(self) -> str:
        return self._job_key

    @property
    def fired(self) -> bool:
        return self._fired

    async def __aenter__(self) -> ComputationCrashGuard:
        if self._registry is not None:
            self._registry.register(self)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool:
        if self._registry is not None:
            self._registry.unregister(self)
        if exc is not None:
            await self.fire(exc)
        self._armed = False
        return False

    def disarm(self) -> None:
        self._armed = False

    async def fire(self, reason: BaseException | str) -> bool:
        """Record the failure once; return True when the marker was written."""

        if self._fired or not self._armed:
            return False
        self._fired = True

        if isinstance(reason, BaseException):
            logger.error(
                "Suggestion computation for '%s' (job %s, claimed at %s) terminated: %r",
                self._job.url,
                self._job_key,
                self._job.started,
                reason,
                exc_info=reason,
            )
        else:
            logger.error(
                "Suggestion computation for '%s' (job %s, claimed at %s) terminated: %s",
                self._job.url,
                self._job_key,
                self._job.started,
                reason,
            )

        try:
            written = await self._records.write_unless_complete(
                self._job_key,
                self._job.failed(),
                self._error_ttl_seconds,
            )
        except Exception:
            logger.exception("Failed to record error marker for job %s.", self._job_key)
            return False

        if not written:
            logger.info(
                "Job %s completed elsewhere; error marker not written.",
                self._job_key,
            )
        return written


__all__ = ["ComputationCrashGuard", "CrashGuardRegistry"]
