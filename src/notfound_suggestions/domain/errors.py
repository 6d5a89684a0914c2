"""Domain exceptions for suggestion job operations."""


class SuggestionJobError(Exception):
    """Base class for suggestion job errors."""


class JobRecordFormatError(SuggestionJobError):
    """Raised when a stored value is not a recognizable job record."""


class JobRecordConflictError(SuggestionJobError):
    """Raised when a guarded write kept losing to concurrent writers."""


class WorkerDispatchError(SuggestionJobError):
    """Raised when a worker invocation could not be delivered."""


__all__ = [
    "JobRecordConflictError",
    "JobRecordFormatError",
    "SuggestionJobError",
    "WorkerDispatchError",
]
