"""
Health Check Endpoints

Provides health and readiness checks for orchestration systems.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from redis.exceptions import RedisError

from backoffice.config import get_settings
from backoffice.gateway.base import QueryGateway
from backoffice.serving.api.dependencies import get_gateway
from backoffice.serving.cache import get_redis

settings = get_settings()
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(gateway: QueryGateway = Depends(get_gateway)) -> HealthResponse:
    """
    Comprehensive health check endpoint.

    Checks:
    - Query gateway connectivity
    - Redis connectivity (optional)
    """
    checks = {}
    overall_status = "healthy"

    if await gateway.ping():
        checks["database"] = {"status": "healthy"}
    else:
        checks["database"] = {"status": "unhealthy"}
        overall_status = "unhealthy"

    redis = get_redis()
    if redis is None:
        checks["redis"] = {"status": "disabled"}
    else:
        try:
            await redis.ping()
            checks["redis"] = {"status": "healthy"}
        except RedisError as e:
            checks["redis"] = {"status": "unhealthy", "error": str(e)}
            if overall_status == "healthy":
                overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """
    Liveness probe endpoint.

    Returns 200 if the application is running.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response, gateway: QueryGateway = Depends(get_gateway)) -> Dict[str, str]:
    """
    Readiness probe endpoint.

    Returns 200 if the query gateway answers.
    """
    if not await gateway.ping():
        response.status_code = 503
        return {"status": "not_ready", "reason": "database_unavailable"}
    return {"status": "ready"}
