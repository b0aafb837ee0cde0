"""Health check endpoints for container orchestration.

Purges only need Discord; the database backs /set_spam_channel alone.
So a lost database degrades /health, while readiness tracks whether
interaction requests can be verified at all.
"""

from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from src.config import settings
from src.database import check_database_connection
from src.services.purge_command import active_purge_count

router = APIRouter(tags=["Health"])


def _json(ok: bool, content: dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_200_OK if ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=content,
    )


@router.get("/health", response_model=None)
async def health_check() -> JSONResponse:
    """
    Overall status.

    Returns:
        {"status": "healthy", "database": "connected", ...} when all is well,
        503 with {"status": "degraded", "database": "disconnected", ...}
        when the database is unreachable.
    """
    db_connected = await check_database_connection()
    return _json(
        db_connected,
        {
            "status": "healthy" if db_connected else "degraded",
            "database": "connected" if db_connected else "disconnected",
            "environment": str(settings.environment),
            "active_purges": active_purge_count(),
        },
    )


@router.get("/health/live")
async def liveness_probe() -> dict[str, Any]:
    """Process is up. Checks nothing external."""
    return {"status": "alive"}


@router.get("/health/ready", response_model=None)
async def readiness_probe() -> JSONResponse:
    """
    Ready once Discord interaction signatures can be checked.

    Without a public key every interaction would be rejected with 401.
    """
    configured = bool(settings.discord_public_key)
    return _json(
        configured,
        {
            "status": "ready" if configured else "not_ready",
            "discord": "configured" if configured else "unconfigured",
        },
    )
