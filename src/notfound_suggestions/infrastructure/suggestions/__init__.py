"""Suggestion engine implementations."""

from notfound_suggestions.infrastructure.suggestions.catalog_suggestion_engine import (
    CatalogEntry,
    CatalogSuggestionEngine,
)

__all__ = ["CatalogEntry", "CatalogSuggestionEngine"]
