"""Infrastructure layer public API."""

from notfound_suggestions.infrastructure.dispatch import (
    HttpWorkerDispatcher,
    InProcessWorkerDispatcher,
)
from notfound_suggestions.infrastructure.rate_limiting import StoreBackedRateLimiter
from notfound_suggestions.infrastructure.rendering import HtmlSuggestionRenderer
from notfound_suggestions.infrastructure.stores import InMemoryJobStore, PostgresJobStore
from notfound_suggestions.infrastructure.suggestions import (
    CatalogEntry,
    CatalogSuggestionEngine,
)

__all__ = [
    "CatalogEntry",
    "CatalogSuggestionEngine",
    "HtmlSuggestionRenderer",
    "HttpWorkerDispatcher",
    "InMemoryJobStore",
    "InProcessWorkerDispatcher",
    "PostgresJobStore",
    "StoreBackedRateLimiter",
]
