"""Health and metrics endpoints.

``/health`` checks the database and whether every process type can be
finalized (has an active terminal phase). A missing terminal phase is
reported as ``degraded``: the service still works, but finalize will fail
for that type until the catalog is fixed.
"""

import secrets
import time
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text
from sqlmodel import select

from src.crm.core.config import get_settings
from src.crm.core.db import get_session
from src.crm.core.logging import get_logger
from src.crm.core.shutdown import request_tracker
from src.crm.models import ProcessPhase, ProcessType

logger = get_logger(__name__)

HEALTH_CACHE_TTL = 10  # seconds

_health_cache: dict[str, Any] | None = None
_health_cache_time: float = 0


def reset_health_cache() -> None:
    """Reset health cache (for testing)."""
    global _health_cache, _health_cache_time
    _health_cache = None
    _health_cache_time = 0


async def _check_dependencies(now: float) -> dict[str, Any]:
    report: dict[str, Any] = {
        "status": "healthy",
        "database": "unknown",
        "terminal_phases": {},
        "cached": False,
        "timestamp": now,
    }
    try:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))
            result = await session.execute(
                select(ProcessPhase.process_type).where(
                    ProcessPhase.is_active == True,  # noqa: E712
                    ProcessPhase.is_terminal == True,  # noqa: E712
                )
            )
            finalizable = set(result.scalars().all())
    except Exception as e:
        logger.error("Health check failed", error=str(e))
        report["database"] = f"unhealthy: {e!s}"
        report["status"] = "unhealthy"
        return report

    report["database"] = "healthy"
    report["terminal_phases"] = {t.value: t.value in finalizable for t in ProcessType}
    if not all(report["terminal_phases"].values()):
        report["status"] = "degraded"
    return report


def _respond(report: dict[str, Any]) -> JSONResponse:
    code = 503 if report["status"] == "unhealthy" else 200
    return JSONResponse(content=report, status_code=code)


def setup_health_endpoint(app: FastAPI) -> None:
    @app.get("/health", include_in_schema=False)
    async def health() -> JSONResponse:
        global _health_cache, _health_cache_time

        now = time.time()
        if request_tracker.is_shutting_down:
            return JSONResponse(
                content={
                    "status": "draining",
                    "in_flight_requests": request_tracker.in_flight_count,
                    "message": "Server is shutting down",
                },
                status_code=503,
            )

        if _health_cache and (now - _health_cache_time) < HEALTH_CACHE_TTL:
            cached = {
                **_health_cache,
                "cached": True,
                "cache_age_seconds": round(now - _health_cache_time, 1),
            }
            return _respond(cached)

        _health_cache = await _check_dependencies(now)
        _health_cache_time = now
        return _respond(_health_cache)


def setup_metrics(app: FastAPI) -> None:
    """Expose Prometheus metrics, behind X-Metrics-Key when one is configured."""
    settings = get_settings()
    instrumentator = Instrumentator(excluded_handlers=["/health", "/metrics"]).instrument(app)

    if not settings.metrics_api_key:
        instrumentator.expose(app, endpoint="/metrics", include_in_schema=False)
        return

    api_key_header = APIKeyHeader(name="X-Metrics-Key", auto_error=False)

    async def verify_metrics_key(api_key: str | None = Depends(api_key_header)) -> None:
        expected = settings.metrics_api_key
        if api_key is None or expected is None or not secrets.compare_digest(api_key, expected):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or missing metrics API key",
            )

    instrumentator.expose(
        app,
        endpoint="/metrics",
        include_in_schema=False,
        dependencies=[Depends(verify_metrics_key)],
    )
