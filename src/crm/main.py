from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.crm.api.middlewares import setup_middlewares
from src.crm.api.v1.router import api_router
from src.crm.core.config import get_settings
from src.crm.core.db import dispose_engine, run_migrations_async
from src.crm.core.exceptions import setup_exception_handlers
from src.crm.core.health import setup_health_endpoint, setup_metrics
from src.crm.core.logging import get_logger, setup_logging
from src.crm.core.shutdown import request_tracker

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info("Starting application", app_name=settings.app_name, env=settings.app_env)

    if settings.auto_migrate:
        logger.info("Applying database migrations")
        await run_migrations_async()

    yield

    # Graceful shutdown: let in-flight transitions commit before closing the pool
    grace_period = settings.shutdown_grace_period
    logger.info("Shutdown initiated", in_flight_requests=request_tracker.in_flight_count)

    await request_tracker.start_shutdown()

    drained = await request_tracker.wait_for_drain(timeout=grace_period)
    if not drained:
        logger.warning(
            "Shutdown timeout, some requests may not have completed",
            grace_period=grace_period,
            in_flight_requests=request_tracker.in_flight_count,
        )

    await dispose_engine()
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "processes", "description": "Process lifecycle, SLA state and finalization"},
    {"name": "phases", "description": "Phase catalog per process type"},
]


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Back-office process tracking with SLA monitoring",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_openapi else None,
        redoc_url="/redoc" if settings.enable_openapi else None,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
    )

    setup_exception_handlers(app)
    setup_middlewares(app, settings)

    app.include_router(api_router)

    setup_metrics(app)
    setup_health_endpoint(app)

    return app


app = create_app()
