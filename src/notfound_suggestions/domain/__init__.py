"""Domain public API."""

from notfound_suggestions.domain.clock import Clock, system_clock
from notfound_suggestions.domain.errors import (
    JobRecordConflictError,
    JobRecordFormatError,
    SuggestionJobError,
    WorkerDispatchError,
)
from notfound_suggestions.domain.job_keys import derive_job_key, normalize_url_for_cache_key
from notfound_suggestions.domain.messages import (
    ComputeOutcome,
    ComputeRequest,
    ComputeResponse,
    PollRequest,
    PollResult,
    PollStatus,
    TriggerRequest,
    TriggerResponse,
)
from notfound_suggestions.domain.poll_nonce import PollNonceSigner
from notfound_suggestions.domain.ports import (
    ConditionalJobStore,
    JobStore,
    PurgeableJobStore,
    SuggestionEngine,
    SuggestionRenderer,
    WorkerDispatcher,
)
from notfound_suggestions.domain.suggestion_jobs import (
    SuggestionJob,
    SuggestionJobStatus,
    stored_status,
    stored_token,
)
from notfound_suggestions.domain.suggestions import Suggestion, SuggestionKind, SuggestionPayload

__all__ = [
    "Clock",
    "ComputeOutcome",
    "ComputeRequest",
    "ComputeResponse",
    "ConditionalJobStore",
    "JobRecordConflictError",
    "JobRecordFormatError",
    "JobStore",
    "PollNonceSigner",
    "PollRequest",
    "PollResult",
    "PollStatus",
    "PurgeableJobStore",
    "Suggestion",
    "SuggestionEngine",
    "SuggestionJob",
    "SuggestionJobError",
    "SuggestionJobStatus",
    "SuggestionKind",
    "SuggestionPayload",
    "SuggestionRenderer",
    "TriggerRequest",
    "TriggerResponse",
    "WorkerDispatchError",
    "WorkerDispatcher",
    "derive_job_key",
    "normalize_url_for_cache_key",
    "stored_status",
    "stored_token",
    "system_clock",
]
