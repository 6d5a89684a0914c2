"""Pydantic models for the trigger, compute and poll boundaries."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class PollStatus(StrEnum):
    """Answers a poller can receive."""

    NOT_FOUND = "not_found"
    PENDING = "pending"
    TIMEOUT = "timeout"
    ERROR = "error"
    COMPLETE = "complete"


class ComputeOutcome(StrEnum):
    """What one worker invocation did with a job."""

    UNAUTHORIZED = "unauthorized"
    ALREADY_COMPLETE = "already_complete"
    ALREADY_FAILED = "already_failed"
    INVALID_RECORD = "invalid_record"
    SKIPPED = "skipped"
    CLAIMED = "claimed"
    COMPLETED = "completed"
    FAILED = "failed"


class SuggestionMessage(BaseModel):
    """Base model for boundary messages."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class TriggerRequest(SuggestionMessage):
    """Request to start a suggestion job for a URL."""

    url: str = Field(min_length=1)


class TriggerResponse(SuggestionMessage):
    """Public answer to a trigger; never carries the compute token."""

    job_key: str = Field(alias="jobKey")
    poll_nonce: str | None = Field(default=None, alias="pollNonce")


class ComputeRequest(SuggestionMessage):
    """Worker invocation carried from the trigger to the coordinator."""

    url: str
    token: str = ""


class ComputeResponse(SuggestionMessage):
    """Acknowledgement returned to the dispatcher."""

    outcome: ComputeOutcome


class PollRequest(SuggestionMessage):
    """Poll for the current state of a job."""

    url: str = ""
    nonce: str | None = None


class PollResult(SuggestionMessage):
    """Poll answer; `message` is always generic and `html` only set when complete."""

    status: PollStatus
    message: str | None = None
    html: str | None = None


__all__ = [
    "ComputeOutcome",
    "ComputeRequest",
    "ComputeResponse",
    "PollRequest",
    "PollResult",
    "PollStatus",
    "TriggerRequest",
    "TriggerResponse",
]
