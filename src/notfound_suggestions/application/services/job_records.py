"""Guarded reads and writes of job records in the shared store."""

from __future__ import annotations

from typing import Any

from notfound_suggestions.domain.errors import JobRecordConflictError
from notfound_suggestions.domain.ports import ConditionalJobStore, JobStore
from notfound_suggestions.domain.suggestion_jobs import (
    SuggestionJob,
    SuggestionJobStatus,
    stored_status,
)

_MAX_CONDITIONAL_ATTEMPTS = 3


class SuggestionJobRecords:
    """Write helpers that keep `complete` records absorbing.

    Against a plain `JobStore` every guarded write is a read followed by an
    unconditional write, so two racing writers may both succeed. When the
    store also implements `ConditionalJobStore` the same operations become
    compare-and-set writes and the race disappears.
    """

    def __init__(self, store: JobStore) -> None:
        self._store = store
        self._conditional = store if isinstance(store, ConditionalJobStore) else None

    async def create(self, key: str, job: SuggestionJob, ttl_seconds: int) -> bool:
        """Store `job` only if no live record exists at `key`."""

        if self._conditional is not None:
            return await self._conditional.set_if_unchanged(
                key,
                None,
                job.to_store_value(),
                ttl_seconds,
            )

        if await self._store.get(key) is not None:
            return False
        await self._store.set(key, job.to_store_value(), ttl_seconds)
        return True

    async def replace(
        self,
        key: str,
        expected: Any,
        job: SuggestionJob,
        ttl_seconds: int,
    ) -> bool:
        """Replace the record read as `expected` with `job`.

        Returns False when a conditional store saw another writer first.
        """

        if self._conditional is not None:
            return await self._conditional.set_if_unchanged(
                key,
                expected,
                job.to_store_value(),
                ttl_seconds,
            )

        await self._store.set(key, job.to_store_value(), ttl_seconds)
        return True

    async def write_unless_complete(
        self,
        key: str,
        job: SuggestionJob,
        ttl_seconds: int,
    ) -> bool:
        """Write `job` unless the live record is already `complete`.

        Returns False only when the record is `complete`. Raises
        `JobRecordConflictError` when every conditional attempt lost.
        """

        for _ in range(_MAX_CONDITIONAL_ATTEMPTS):
            current = await self._store.get(key)
            if stored_status(current) == SuggestionJobStatus.COMPLETE:
                return False

            if await self.replace(key, current, job, ttl_seconds):
                return True

        raise JobRecordConflictError(
            f"Gave up writing '{job.status.value}' record for job {key} "
            f"after {_MAX_CONDITIONAL_ATTEMPTS} contended attempts."
        )


__all__ = ["SuggestionJobRecords"]
