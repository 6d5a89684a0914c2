"""Fuzzy matching of request slugs against a static page catalog."""

from __future__ import annotations

import asyncio
import logging
import re
from difflib import SequenceMatcher
from pathlib import Path
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, TypeAdapter

from notfound_suggestions.domain.ports import SuggestionEngine
from notfound_suggestions.domain.suggestions import (
    Suggestion,
    SuggestionKind,
    SuggestionPayload,
)

logger = logging.getLogger(__name__)

_WORD_SEPARATORS = re.compile(r"[^0-9a-z]+")


class CatalogEntry(BaseModel):
    """One linkable resource of the site."""

    model_config = ConfigDict(extra="ignore")

    title: str
    url: str
    kind: SuggestionKind = SuggestionKind.PAGE


_CATALOG_ADAPTER = TypeAdapter(list[CatalogEntry])


def slugify(value: str) -> str:
    """Lowercase `value` and join its alphanumeric runs with dashes."""

    return "-".join(part for part in _WORD_SEPARATORS.split(value.lower()) if part)


class CatalogSuggestionEngine(SuggestionEngine):
    """Rank catalog entries by similarity between the slug and each entry."""

    def __init__(
        self,
        entries: list[CatalogEntry] | None = None,
        *,
        limit: int = 10,
        min_score: float = 0.35,
    ) -> None:
        self._entries = list(entries or [])
        self._limit = max(limit, 1)
        self._min_score = min(max(min_score, 0.0), 1.0)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        *,
        limit: int = 10,
        min_score: float = 0.35,
    ) -> CatalogSuggestionEngine:
        """Load a JSON array of `{title, url, kind}` objects."""

        raw = Path(path).read_text(encoding="utf-8")
        entries = _CATALOG_ADAPTER.validate_json(raw)
        logger.info("Loaded %s catalog entries from '%s'.", len(entries), path)
        return cls(entries, limit=limit, min_score=min_score)

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    async def compute_suggestions(
        self,
        url_slug: str,
        *,
        include_categories: bool,
        include_tags: bool,
    ) -> SuggestionPayload:
        return await asyncio.to_thread(
            self._rank,
            url_slug,
            include_categories,
            include_tags,
        )

    def _rank(
        self,
        url_slug: str,
        include_categories: bool,
        include_tags: bool,
    ) -> SuggestionPayload:
        needle = slugify(urlparse(url_slug).path or url_slug)
        if not needle:
            return SuggestionPayload()

        excluded: set[SuggestionKind] = set()
        if not include_categories:
            excluded.add(SuggestionKind.CATEGORY)
        if not include_tags:
            excluded.add(SuggestionKind.TAG)

        scored: list[Suggestion] = []
        for entry in self._entries:
            if entry.kind in excluded:
                continue
            score = self._score(needle, entry)
            if score < self._min_score:
                continue
            scored.append(
                Suggestion(title=entry.title, url=entry.url, score=score, kind=entry.kind)
            )

        scored.sort(key=lambda suggestion: (-suggestion.score, suggestion.title))
        return SuggestionPayload(suggestions=scored[: self._limit])

    def _score(self, needle: str, entry: CatalogEntry) -> float:
        path = urlparse(entry.url).path
        segments = [segment for segment in path.split("/") if segment]
        candidates = {slugify(entry.title), slugify(path)}
        if segments:
            candidates.add(slugify(segments[-1]))
        candidates.discard("")
        if not candidates:
            return 0.0

        best = max(SequenceMatcher(None, needle, candidate).ratio() for candidate in candidates)
        return round(min(max(best, 0.0), 1.0), 3)


__all__ = ["CatalogEntry", "CatalogSuggestionEngine", "slugify"]
