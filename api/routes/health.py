"""
Health Routes
Liveness/readiness probes for the container orchestrator.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_app_settings
from config.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _check_database(request: Request) -> str | None:
    """Return None when `SELECT 1` succeeds, otherwise the error text."""
    try:
        conn = request.app.state.connection_factory()
        try:
            conn.execute("SELECT 1").fetchone()
        finally:
            conn.close()
    except Exception as e:
        logger.warning(f"Database health check failed: {e}", extra={"step": "health", "status": "unhealthy"})
        return str(e) or "Database connection failed"
    return None


@router.get("/health")
def health(request: Request, settings: Settings = Depends(get_app_settings)):
    db_error = _check_database(request)
    return {
        "status": "ok" if db_error is None else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.service_name,
        "version": settings.service_version,
        "checks": {"database": "healthy" if db_error is None else "unhealthy"},
    }


@router.get("/health/live")
def live():
    return {"status": "ok"}


@router.get("/health/ready")
def ready(request: Request):
    if _check_database(request) is None:
        return {"status": "ready"}
    return {"status": "not_ready", "error": "Database connection failed"}
