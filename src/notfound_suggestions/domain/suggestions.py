"""Suggestion payload models produced by the matching engine."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class SuggestionKind(StrEnum):
    """Kind of site resource a suggestion points to."""

    PAGE = "page"
    POST = "post"
    CATEGORY = "category"
    TAG = "tag"


class SuggestionModel(BaseModel):
    """Base model for stored suggestion payloads."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class Suggestion(SuggestionModel):
    """One suggested destination for a request that matched nothing."""

    title: str
    url: str
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    kind: SuggestionKind = SuggestionKind.PAGE


class SuggestionPayload(SuggestionModel):
    """Result of one suggestion computation."""

    suggestions: list[Suggestion] = Field(default_factory=list)


__all__ = ["Suggestion", "SuggestionKind", "SuggestionPayload"]
