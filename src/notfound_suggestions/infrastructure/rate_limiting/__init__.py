"""Rate limiting implementations."""

from notfound_suggestions.infrastructure.rate_limiting.store_rate_limiter import (
    StoreBackedRateLimiter,
)

__all__ = ["StoreBackedRateLimiter"]
