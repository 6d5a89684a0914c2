"""Ports for the shared store, worker dispatch, matching and rendering."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from notfound_suggestions.domain.suggestions import SuggestionPayload


class JobStore(Protocol):
    """Shared key-value store with per-entry expiry and no locking guarantees."""

    async def get(self, key: str) -> Any | None:
        """Return the live value stored at `key`, or None when absent/expired."""

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store `value` at `key` for `ttl_seconds`."""

    async def delete(self, key: str) -> None:
        """Remove `key` if present."""


@runtime_checkable
class ConditionalJobStore(Protocol):
    """Optional store extension offering an atomic compare-and-set write."""

    async def set_if_unchanged(
        self,
        key: str,
        expected: Any,
        value: Any,
        ttl_seconds: int,
    ) -> bool:
        """Write `value` only if the live value at `key` still equals `expected`."""


@runtime_checkable
class PurgeableJobStore(Protocol):
    """Optional store extension for stores that keep expired rows around."""

    async def purge_expired(self) -> int:
        """Delete expired entries and return how many were removed."""


class WorkerDispatcher(Protocol):
    """Out-of-band, fire-and-forget invocation of the worker coordinator."""

    async def dispatch(self, url: str, token: str) -> None:
        """Schedule one worker invocation without waiting for its outcome."""


class SuggestionEngine(Protocol):
    """Matching algorithm that turns a URL slug into suggestions."""

    async def compute_suggestions(
        self,
        url_slug: str,
        *,
        include_categories: bool,
        include_tags: bool,
    ) -> SuggestionPayload:
        """Compute suggestions; may take non-trivial wall-clock time."""


class SuggestionRenderer(Protocol):
    """Render computed suggestions for the poll response."""

    def render(self, payload: SuggestionPayload, url: str) -> str:
        """Return an HTML fragment for `payload`."""


__all__ = [
    "ConditionalJobStore",
    "JobStore",
    "PurgeableJobStore",
    "SuggestionEngine",
    "SuggestionRenderer",
    "WorkerDispatcher",
]
