"""HTML fragment rendering for completed suggestion jobs."""

from __future__ import annotations

from html import escape

from notfound_suggestions.domain.ports import SuggestionRenderer
from notfound_suggestions.domain.suggestions import SuggestionPayload


class HtmlSuggestionRenderer(SuggestionRenderer):
    """Render suggestions as an escaped `<ul>` list."""

    def __init__(
        self,
        heading: str = "Here are some pages you might be looking for:",
        empty_text: str = "Sorry, no suggestions available.",
    ) -> None:
        self._heading = heading
        self._empty_text = empty_text

    def render(self, payload: SuggestionPayload, url: str) -> str:
        lines = [
            f'<div class="suggestions" data-requested-url="{escape(url, quote=True)}">',
            f'<p class="suggestions-heading">{escape(self._heading)}</p>',
            '<ul class="suggestions-list">',
        ]
        if not payload.suggestions:
            lines.append(f'<li class="no-suggestions">{escape(self._empty_text)}</li>')
        for suggestion in payload.suggestions:
            lines.append(
                f'<li class="suggestion suggestion-{suggestion.kind.value}">'
                f'<a href="{escape(suggestion.url, quote=True)}">{escape(suggestion.title)}</a>'
                "</li>"
            )
        lines.extend(["</ul>", "</div>"])
        return "\n".join(lines)


__all__ = ["HtmlSuggestionRenderer"]
