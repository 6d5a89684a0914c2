"""Models for the poll client and the client poll loop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from notfound_suggestions.domain.messages import PollStatus

FALLBACK_TEXT = "Sorry, no suggestions available."


class PollResponse(BaseModel):
    """Poll answer as seen by a client; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: PollStatus
    message: str | None = None
    html: str | None = None


@dataclass(slots=True, frozen=True)
class PollLoopSettings:
    """Budgets of one poll loop."""

    interval_seconds: float = 1.0
    max_attempts: int = 90
    not_found_budget: int = 5
    transport_retry_limit: int = 5
    retry_max_delay_seconds: float = 16.0

    def __post_init__(self) -> None:
        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0.")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1.")
        if self.not_found_budget < 1:
            raise ValueError("not_found_budget must be >= 1.")
        if self.transport_retry_limit < 0:
            raise ValueError("transport_retry_limit must be >= 0.")


class PollLoopOutcome(StrEnum):
    """How a poll loop ended."""

    COMPLETE = "complete"
    FALLBACK = "fallback"


@dataclass(slots=True, frozen=True)
class PollLoopResult:
    """Final state of one poll loop."""

    outcome: PollLoopOutcome
    html: str
    attempts: int
    last_status: PollStatus | None = None
    reason: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.outcome is PollLoopOutcome.COMPLETE


__all__ = [
    "FALLBACK_TEXT",
    "PollLoopOutcome",
    "PollLoopResult",
    "PollLoopSettings",
    "PollResponse",
]
