"""Suggestion job records kept in the shared TTL store."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any

from pydantic import ValidationError

from notfound_suggestions.domain.errors import JobRecordFormatError
from notfound_suggestions.domain.suggestions import SuggestionPayload


class SuggestionJobStatus(StrEnum):
    """Stored lifecycle states of a suggestion job."""

    PENDING = "pending"
    COMPLETE = "complete"
    ERROR = "error"


def stored_token(value: object) -> str | None:
    """Return the compute token of a raw stored record, if it carries one."""

    if not isinstance(value, Mapping):
        return None
    token = value.get("token")
    return token if isinstance(token, str) and token else None


def stored_status(value: object) -> str | None:
    """Return the raw status string of a stored record without validating it."""

    if not isinstance(value, Mapping):
        return None
    status = value.get("status")
    return status if isinstance(status, str) else None


@dataclass(slots=True, frozen=True)
class SuggestionJob:
    """Immutable snapshot of one job record.

    Transitions never mutate a record in place: each helper returns the whole
    replacement value, which is what gets written back to the store.
    """

    status: SuggestionJobStatus
    token: str | None
    url: str = ""
    started: int = 0
    suggestions: SuggestionPayload | None = None
    completed: int | None = None

    @classmethod
    def pending(cls, url: str, token: str) -> SuggestionJob:
        """Return a freshly triggered, unclaimed job."""

        return cls(status=SuggestionJobStatus.PENDING, token=token, url=url, started=0)

    @classmethod
    def cached(cls, url: str, payload: SuggestionPayload, now: int) -> SuggestionJob:
        """Return a completed record for suggestions computed outside a worker."""

        return cls(
            status=SuggestionJobStatus.COMPLETE,
            token=None,
            url=url,
            suggestions=payload,
            completed=now,
        )

    @property
    def is_claimed(self) -> bool:
        return self.started > 0

    def claimed(self, now: int) -> SuggestionJob:
        """Return this pending job claimed at `now`."""

        return replace(self, started=max(now, self.started))

    def completed_with(self, payload: SuggestionPayload, now: int) -> SuggestionJob:
        """Return the terminal record carrying computed suggestions."""

        return SuggestionJob(
            status=SuggestionJobStatus.COMPLETE,
            token=self.token,
            url=self.url,
            suggestions=payload,
            completed=now,
        )

    def failed(self) -> SuggestionJob:
        """Return the crash marker; it carries no diagnostic detail."""

        return SuggestionJob(status=SuggestionJobStatus.ERROR, token=self.token)

    def to_store_value(self) -> dict[str, Any]:
        """Serialize to the JSON-compatible mapping kept in the store."""

        if self.status is SuggestionJobStatus.ERROR:
            return {"status": self.status.value, "token": self.token}

        value: dict[str, Any] = {
            "status": self.status.value,
            "url": self.url,
            "token": self.token,
        }
        if self.status is SuggestionJobStatus.PENDING:
            value["started"] = self.started
            return value

        value["suggestions"] = (
            None if self.suggestions is None else self.suggestions.model_dump(mode="json")
        )
        value["completed"] = self.completed
        return value

    @classmethod
    def from_store_value(cls, value: object) -> SuggestionJob:
        """Parse a stored mapping, rejecting anything outside the job protocol."""

        if not isinstance(value, Mapping):
            raise JobRecordFormatError(f"Expected a mapping job record, got {type(value)!r}.")

        raw_status = value.get("status")
        try:
            status = SuggestionJobStatus(raw_status)
        except ValueError as exc:
            raise JobRecordFormatError(f"Unknown job status {raw_status!r}.") from exc

        token = stored_token(value)
        raw_url = value.get("url")
        url = raw_url if isinstance(raw_url, str) else ""

        try:
            started = int(value.get("started") or 0)
            raw_completed = value.get("completed")
            completed = None if raw_completed is None else int(raw_completed)
        except (TypeError, ValueError) as exc:
            raise JobRecordFormatError("Job record timestamps must be integers.") from exc

        suggestions = None
        raw_suggestions = value.get("suggestions")
        if raw_suggestions is not None:
            try:
                suggestions = SuggestionPayload.model_validate(raw_suggestions)
            except ValidationError as exc:
                raise JobRecordFormatError("Job record carries an invalid payload.") from exc

        return cls(
            status=status,
            token=token,
            url=url,
            started=started,
            suggestions=suggestions,
            completed=completed,
        )


__all__ = [
    "SuggestionJob",
    "SuggestionJobStatus",
    "stored_status",
    "stored_token",
]
