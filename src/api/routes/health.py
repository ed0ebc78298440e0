"""Liveness and database readiness probes."""

import time

import aiosqlite
from fastapi import APIRouter

from src.application.dto.responses import ComponentHealth, HealthResponse
from src.config import get_logger, get_settings

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

_started_at = time.monotonic()


def _uptime() -> float:
    return time.monotonic() - _started_at


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy", version=get_settings().app_version, uptime_seconds=_uptime()
    )


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """Round-trip the pool and report the applied schema version."""
    from src.infrastructure.storage.sqlite import get_connection
    from src.infrastructure.storage.sqlite.migrations.migrator import get_current_version

    started = time.perf_counter()
    try:
        async with get_connection() as conn:
            version = await get_current_version(conn)
    except aiosqlite.Error as e:
        logger.warning("db_health_failed", error=str(e))
        database = ComponentHealth(name="sqlite", available=False, error=str(e))
    else:
        database = ComponentHealth(
            name="sqlite",
            available=version is not None,
            latency_ms=round((time.perf_counter() - started) * 1000, 2),
            schema_version=version,
            error=None if version else "schema not migrated",
        )

    return HealthResponse(
        status="healthy" if database.available else "unhealthy",
        version=get_settings().app_version,
        uptime_seconds=_uptime(),
        database=database,
    )
