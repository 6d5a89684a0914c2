"""Route modules public API."""

from notfound_suggestions.api.routes.health import router as health_router
from notfound_suggestions.api.routes.suggestions import router as suggestions_router

__all__ = ["health_router", "suggestions_router"]
