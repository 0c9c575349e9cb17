"""Health check endpoint for monitoring service status."""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from library_api.logging import logger
from library_api.settings import app_settings
from library_api.storage.db import engine
from library_api.storage.redis import get_redis_connection

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    database: str
    cache: str


async def _check_database() -> str:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        logger.error(f"Database health check failed: {e}")
        return "unhealthy"
    return "healthy"


async def _check_cache() -> str:
    # The in-process backend has nothing external to reach
    if app_settings.CACHE_BACKEND != "redis":
        return "healthy"

    try:
        r = await get_redis_connection()
        await r.ping()
    except (RedisError, ConnectionError, TimeoutError) as e:
        logger.error(f"Redis health check failed: {e}")
        return "unhealthy"
    return "healthy"


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check(response: Response) -> HealthResponse:
    """
    Check health status of the application and its dependencies.

    This endpoint verifies:
    - Database connectivity
    - Redis connectivity (only when CACHE_BACKEND is "redis")

    Returns:
        HealthResponse: Health status of the service and dependencies.
        Returns 503 Service Unavailable if any service is unhealthy.
    """
    db_status = await _check_database()
    cache_status = await _check_cache()

    overall_status = (
        "healthy"
        if db_status == "healthy" and cache_status == "healthy"
        else "unhealthy"
    )

    if overall_status == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status=overall_status, database=db_status, cache=cache_status
    )
