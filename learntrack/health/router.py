"""Liveness, readiness and version endpoints."""

from fastapi import APIRouter, Request

from learntrack.config import get_settings


router = APIRouter(prefix="/health", tags=["health"])

# Set on app.state once the Cassandra session is up
WIRED_SERVICES = (
    "course_modules_store",
    "module_lessons_store",
    "progress_service",
    "quiz_service",
    "relation_backfill",
)


@router.get("/live")
async def liveness() -> dict[str, str]:
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, object]:
    """Ready when every storage-backed service is wired.

    Without a database the API keeps serving and reports "degraded"; the
    affected routes answer 503.
    """
    wired = {
        name: getattr(request.app.state, name, None) is not None
        for name in WIRED_SERVICES
    }
    ready = all(wired.values())
    return {
        "status": "ready" if ready else "degraded",
        "database": ready,
        "services": wired,
        "environment": get_settings().environment,
    }


@router.get("")
async def health() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
