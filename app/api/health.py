from datetime import datetime, UTC
from time import time
from typing import Dict, Any

from fastapi import APIRouter

from app.core.config import settings, startup_time
from app.db.client import check_database_connection
from app.db.redis_client import redis_client

router = APIRouter(prefix="/health", tags=["Health"])


def calculate_uptime() -> Dict[str, Any]:
    """
    Time elapsed since the settings module was first imported.
    """
    uptime_seconds = time() - startup_time
    hours, remainder = divmod(int(uptime_seconds), 3600)
    minutes, seconds = divmod(remainder, 60)

    return {
        "uptime_seconds": round(uptime_seconds, 2),
        "uptime_formatted": f"{hours}h {minutes}m {seconds}s",
    }


def _status_payload(status: str) -> Dict[str, Any]:
    return {
        "status": status,
        "service": settings.APP_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(UTC).isoformat(),
        **calculate_uptime(),
    }


@router.get("/")
async def health_check():
    """
    Liveness probe. Does not touch backing services.
    """
    return _status_payload("healthy")


@router.get("/details")
async def health_check_details():
    """
    Readiness probe. The service is degraded without its database; Redis
    only matters when real-time broadcast is enabled.
    """
    database_ok = await check_database_connection()
    redis_ok = await redis_client.ping()
    broadcast_ok = redis_ok or not settings.NOTIFICATIONS_BROADCAST_ENABLED

    return {
        **_status_payload("healthy" if database_ok and broadcast_ok else "degraded"),
        "database": "connected" if database_ok else "unavailable",
        "redis": "connected" if redis_ok else "disconnected",
        "notifications_broadcast": settings.NOTIFICATIONS_BROADCAST_ENABLED,
    }
