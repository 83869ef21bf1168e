"""
Health check route.
"""
from fastapi import APIRouter

from studio.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Liveness probe."""
    return {
        "status": "ok",
        "version": settings.app_version,
        "supabase_configured": settings.supabase_configured,
    }
