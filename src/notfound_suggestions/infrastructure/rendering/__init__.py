"""Suggestion renderer implementations."""

from notfound_suggestions.infrastructure.rendering.html_suggestion_renderer import (
    HtmlSuggestionRenderer,
)

__all__ = ["HtmlSuggestionRenderer"]
