"""Client for polling deferred suggestion jobs."""

from notfound_suggestions_client.client import SuggestionPollClient, SuggestionPollClientError
from notfound_suggestions_client.models import (
    FALLBACK_TEXT,
    PollLoopOutcome,
    PollLoopResult,
    PollLoopSettings,
    PollResponse,
)
from notfound_suggestions_client.poll_loop import wait_for_suggestions

__all__ = [
    "FALLBACK_TEXT",
    "PollLoopOutcome",
    "PollLoopResult",
    "PollLoopSettings",
    "PollResponse",
    "SuggestionPollClient",
    "SuggestionPollClientError",
    "wait_for_suggestions",
]
