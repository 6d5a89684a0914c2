"""Dependency providers for FastAPI routes."""

from functools import lru_cache

from notfound_suggestions.bootstrap import SuggestionServices, build_suggestion_services
from notfound_suggestions.config import Settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return singleton settings."""

    return Settings()


@lru_cache(maxsize=1)
def get_suggestion_services() -> SuggestionServices:
    """Return singleton service graph."""

    return build_suggestion_services(get_settings())


__all__ = ["get_settings", "get_suggestion_services"]
