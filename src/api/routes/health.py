# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

This module provides health, readiness and liveness endpoints for the API.
"""

import logging
import time
from datetime import datetime
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from src.core.config import get_settings
from src.infrastructure.cache import RedisError, get_redis
from src.infrastructure.database import check_database_connection
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class ComponentHealth(BaseModel):
    """Individual component health status."""
    status: str = Field(description="Component status")
    latency_ms: float | None = Field(None, description="Response latency in ms")
    message: str | None = Field(None, description="Additional status message")


class ComponentsHealth(BaseModel):
    database: ComponentHealth | None = None
    redis: ComponentHealth | None = None


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(description="Overall health status")
    timestamp: datetime = Field(description="Current server timestamp")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Server uptime in seconds")
    components: ComponentsHealth = Field(default_factory=ComponentsHealth)


class ReadinessResponse(BaseModel):
    ready: bool = Field(description="Whether the service is ready")
    checks: dict[str, Any] = Field(description="Individual check results")


async def check_database() -> ComponentHealth:
    """Ping MongoDB."""
    start = time.perf_counter()
    if not await check_database_connection():
        logger.error("Database health check failed")
        return ComponentHealth(status="unhealthy", message="MongoDB ping failed")

    latency = (time.perf_counter() - start) * 1000
    return ComponentHealth(status="healthy", latency_ms=round(latency, 2))


async def check_redis() -> ComponentHealth:
    """Ping Redis through the shared client."""
    try:
        client = get_redis()
    except RedisError as e:
        return ComponentHealth(status="unhealthy", message=e.message)

    start = time.perf_counter()
    if not await client.ping():
        logger.error("Redis health check failed")
        return ComponentHealth(status="unhealthy", message="Redis ping failed")

    latency = (time.perf_counter() - start) * 1000
    return ComponentHealth(status="healthy", latency_ms=round(latency, 2))


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check if the API is healthy with component details.

    The overall status is "healthy" when every component is, "degraded"
    when only the cache is down and "unhealthy" when the database is down.
    """
    settings = get_settings()
    db_health = await check_database()
    redis_health = await check_redis()

    if db_health.status != "healthy":
        overall_status = "unhealthy"
    elif redis_health.status != "healthy":
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    return HealthResponse(
        status=overall_status,
        timestamp=utc_now(),
        version="1.0.0",
        environment=settings.environment,
        uptime_seconds=int(time.time() - _server_start_time),
        components=ComponentsHealth(database=db_health, redis=redis_health),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Check if the API is ready to accept traffic."""
    checks: dict[str, Any] = {}

    db_health = await check_database()
    checks["database"] = {"status": db_health.status, "latency_ms": db_health.latency_ms}

    redis_health = await check_redis()
    checks["redis"] = {"status": redis_health.status, "latency_ms": redis_health.latency_ms}

    ready = db_health.status == "healthy" and redis_health.status == "healthy"
    return ReadinessResponse(ready=ready, checks=checks)


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
