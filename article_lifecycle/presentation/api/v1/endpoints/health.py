"""Health check endpoint — no dependencies, always available."""

from fastapi import APIRouter

from article_lifecycle.config import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    """Application status plus the sweep settings that bound publish lateness."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "sweepers": {
            "enabled": settings.sweepers_enabled,
            "publish_interval_seconds": settings.publish_sweep_interval_seconds,
            "retention_interval_seconds": settings.retention_sweep_interval_seconds,
            "retention_days": settings.retention_days,
        },
    }
