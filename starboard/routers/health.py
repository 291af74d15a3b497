"""
Health Check Router - Starboard Evaluation API
starboard/routers/health.py

Returns health status of the database and the Redis cache with real
connection checks.
"""
from datetime import datetime, timezone
from typing import Dict

import redis
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from starboard.config import get_settings
from starboard.services.database import get_connection

router = APIRouter(tags=["Health"])


#  Schemas


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    dependencies: Dict[str, str]


#  Dependency Health Checks


def _short(e: Exception) -> str:
    return str(e)[:100] + "..." if len(str(e)) > 100 else str(e)


def check_database() -> str:
    """Run a trivial query on the configured backend."""
    settings = get_settings()
    try:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.fetchone()
            cursor.close()
        finally:
            conn.close()
        return f"healthy ({settings.DB_BACKEND})"
    except Exception as e:
        return f"unhealthy: {_short(e)}"


def check_redis() -> str:
    """Check Redis connection health."""
    settings = get_settings()
    if not settings.CACHE_ENABLED:
        return "disabled"
    try:
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
        )
        client.ping()
        client.close()
        return "healthy"
    except Exception as e:
        return f"unhealthy: {_short(e)}"


#  Main Health Check Route


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={
        200: {"description": "Database reachable (cache may be degraded)"},
        503: {"description": "Database unreachable"},
    },
    summary="Health check",
    description="Check health of the database and the Redis cache. "
                "An unreachable cache only degrades the service.",
)
def health_check():
    settings = get_settings()
    dependencies = {
        "database": check_database(),
        "redis": check_redis(),
    }

    database_ok = dependencies["database"].startswith("healthy")
    cache_ok = not dependencies["redis"].startswith("unhealthy")

    response = HealthResponse(
        status="healthy" if database_ok and cache_ok else ("degraded" if database_ok else "unhealthy"),
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION,
        dependencies=dependencies,
    )

    if database_ok:
        return response
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response.model_dump(mode="json"),
    )
