"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_ai_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.ai_client import check_health as ai_health_check
    return ai_health_check


@router.get("/health/ai", status_code=status.HTTP_200_OK)
def health_ai() -> dict:
    """Report whether AI route ordering is configured and reachable."""
    if not settings.ai_enabled:
        return {"service": "ai", "configured": False, "healthy": False}
    try:
        ai_health_check = _get_ai_health_check()
        return {"service": "ai", "configured": True, "healthy": ai_health_check()}
    except Exception as e:
        return {"service": "ai", "configured": True, "healthy": False, "error": str(e)}
