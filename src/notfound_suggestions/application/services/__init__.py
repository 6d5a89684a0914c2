"""Application service layer."""

from notfound_suggestions.application.services.crash_guard import (
    ComputationCrashGuard,
    CrashGuardRegistry,
)
from notfound_suggestions.application.services.expired_job_purger import ExpiredJobPurger
from notfound_suggestions.application.services.job_policy import SuggestionJobPolicy
from notfound_suggestions.application.services.job_records import SuggestionJobRecords
from notfound_suggestions.application.services.poll_service import SuggestionPollService
from notfound_suggestions.application.services.trigger_service import (
    SuggestionTriggerService,
    TriggeredJob,
)
from notfound_suggestions.application.services.worker_coordinator import (
    ClaimDecision,
    WorkerCoordinator,
)

__all__ = [
    "ClaimDecision",
    "ComputationCrashGuard",
    "CrashGuardRegistry",
    "ExpiredJobPurger",
    "SuggestionJobPolicy",
    "SuggestionJobRecords",
    "SuggestionPollService",
    "SuggestionTriggerService",
    "TriggeredJob",
    "WorkerCoordinator",
]
