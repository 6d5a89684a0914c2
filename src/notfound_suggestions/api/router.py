"""Top-level API router composition."""

from fastapi import APIRouter

from notfound_suggestions.api.routes import health_router, suggestions_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(suggestions_router)

__all__ = ["api_router"]
