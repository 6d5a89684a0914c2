"""Worker dispatch implementations."""

from notfound_suggestions.infrastructure.dispatch.http_worker_dispatcher import (
    HttpWorkerDispatcher,
)
from notfound_suggestions.infrastructure.dispatch.in_process_worker_dispatcher import (
    InProcessWorkerDispatcher,
)

__all__ = ["HttpWorkerDispatcher", "InProcessWorkerDispatcher"]
