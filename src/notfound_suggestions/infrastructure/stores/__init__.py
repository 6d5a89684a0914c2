"""Job store implementations."""

from notfound_suggestions.infrastructure.stores.in_memory_job_store import InMemoryJobStore
from notfound_suggestions.infrastructure.stores.postgres_job_store import PostgresJobStore

__all__ = ["InMemoryJobStore", "PostgresJobStore"]
