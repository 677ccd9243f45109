"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_maps_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.maps_client import check_health as maps_health_check
    return maps_health_check


@router.get("/health/maps", status_code=status.HTTP_200_OK)
async def health_maps() -> dict:
    """Check that the geocoding/distance matrix provider is configured and answering."""
    if not settings.google_maps_api_key:
        return {"service": "google-maps", "configured": False, "healthy": False}
    try:
        maps_health_check = _get_maps_health_check()
        healthy = await maps_health_check()
        return {"service": "google-maps", "configured": True, "healthy": healthy}
    except Exception as exc:
        return {"service": "google-maps", "configured": True, "healthy": False, "error": type(exc).__name__}
