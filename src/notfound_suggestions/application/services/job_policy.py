"""Timing policy shared by every role that reads or writes job records."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class SuggestionJobPolicy:
    """Expiry and recovery timings for suggestion jobs.

    `recovery_threshold_seconds` is deliberately a single value: the worker
    uses it to decide when a claimed job may be taken over and the poller uses
    it to decide when a claimed job is reported as timed out.
    """

    job_ttl_seconds: int = 120
    error_ttl_seconds: int = 60
    cached_completion_ttl_seconds: int = 300
    recovery_threshold_seconds: int = 90

    def __post_init__(self) -> None:
        if self.recovery_threshold_seconds < 1:
            raise ValueError("recovery_threshold_seconds must be >= 1.")
        if self.job_ttl_seconds <= self.recovery_threshold_seconds:
            raise ValueError("job_ttl_seconds must be greater than recovery_threshold_seconds.")
        if self.error_ttl_seconds < 1:
            raise ValueError("error_ttl_seconds must be >= 1.")
        if self.cached_completion_ttl_seconds < 1:
            raise ValueError("cached_completion_ttl_seconds must be >= 1.")


__all__ = ["SuggestionJobPolicy"]
