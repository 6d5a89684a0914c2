"""HTTP API package."""

from notfound_suggestions.api.router import api_router

__all__ = ["api_router"]
