"""Health check routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from notfound_suggestions.api.dependencies import get_suggestion_services
from notfound_suggestions.bootstrap import SuggestionServices

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

_READINESS_PROBE_KEY = "readiness_probe"


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    """Liveness probe."""

    return {"status": "ok"}


@router.get("/readyz")
async def readyz(
    services: SuggestionServices = Depends(get_suggestion_services),
) -> dict[str, str]:
    """Readiness probe; fails while the shared store is unreachable."""

    try:
        await services.store.get(_READINESS_PROBE_KEY)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Shared job store is not reachable: %s", exc)
        raise HTTPException(status_code=503, detail="Job store unavailable") from exc
    return {"status": "ready", "store": services.settings.store_backend.value}


__all__ = ["router"]
