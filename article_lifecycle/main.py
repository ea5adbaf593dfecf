"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from article_lifecycle.config import get_settings
from article_lifecycle.application.schemas import ErrorResponse
from article_lifecycle.application.services import (
    PeriodicSweeper,
    RetentionScheduler,
    ScheduledPublisher,
)
from article_lifecycle.domain.exceptions import (
    EntityNotFoundError,
    InvalidTransitionError,
    LifecycleError,
    PermissionDeniedError,
    RetentionExpiredError,
    StaleStateError,
    StorageUnavailableError,
)
from article_lifecycle.infrastructure.database import Base, engine
from article_lifecycle.infrastructure.dependencies import lifecycle_service_scope
from article_lifecycle.infrastructure.logging.log_config import setup_logging
from article_lifecycle.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)

# Most specific first; LifecycleError itself maps to 500
_STATUS_BY_ERROR: list[tuple[type[LifecycleError], int]] = [
    (EntityNotFoundError, 404),
    (PermissionDeniedError, 403),
    (RetentionExpiredError, 410),
    (InvalidTransitionError, 409),
    (StaleStateError, 409),
    (StorageUnavailableError, 503),
]


async def _ensure_database_exists() -> None:
    """Create the PostgreSQL database if it does not yet exist.

    Connects to the default ``postgres`` maintenance database, checks for the
    target database name, and issues ``CREATE DATABASE`` when missing.
    """
    from urllib.parse import urlparse

    import asyncpg

    settings = get_settings()
    if not settings.database_url.startswith(("postgresql://", "postgresql+asyncpg://")):
        return

    parsed = urlparse(settings.database_url)
    db_name = parsed.path.lstrip("/")
    if not db_name:
        return

    # asyncpg understands only the plain postgresql:// scheme
    maintenance_url = settings.database_url.rsplit("/", 1)[0] + "/postgres"
    maintenance_url = maintenance_url.replace("postgresql+asyncpg://", "postgresql://", 1)

    try:
        conn = await asyncpg.connect(maintenance_url)
        try:
            exists = await conn.fetchval(
                "SELECT 1 FROM pg_database WHERE datname = $1", db_name
            )
            if not exists:
                # CREATE DATABASE cannot run inside a transaction block
                await conn.execute(f'CREATE DATABASE "{db_name}"')
                logger.info("Created database '%s'", db_name)
            else:
                logger.debug("Database '%s' already exists", db_name)
        finally:
            await conn.close()
    except Exception as exc:
        logger.warning("Could not auto-create database '%s': %s", db_name, exc)


def build_sweepers() -> list[PeriodicSweeper]:
    """The scheduled publisher and the retention scheduler, configured from Settings."""
    settings = get_settings()
    common = dict(
        service_scope=lifecycle_service_scope,
        batch_size=settings.sweep_batch_size,
        item_timeout_seconds=settings.sweep_item_timeout_seconds,
        max_retries=settings.sweep_max_retries,
        retry_base_delay_seconds=settings.sweep_retry_base_delay_seconds,
        failure_cooldown_sweeps=settings.sweep_failure_cooldown_sweeps,
    )
    return [
        ScheduledPublisher(interval_seconds=settings.publish_sweep_interval_seconds, **common),
        RetentionScheduler(interval_seconds=settings.retention_sweep_interval_seconds, **common),
    ]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — create tables, start the sweepers."""
    settings = get_settings()
    setup_logging()

    # 0. Ensure the PostgreSQL database exists (auto-create if missing)
    await _ensure_database_exists()

    # 1. Create all database tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # 2. Start the scheduled publisher and retention scheduler
    sweepers = build_sweepers() if settings.sweepers_enabled else []
    for sweeper in sweepers:
        await sweeper.start()
    if not sweepers:
        logger.warning("Sweepers disabled: scheduled articles will not auto-publish")

    yield

    # Shutdown
    for sweeper in sweepers:
        await sweeper.stop()
    await engine.dispose()


def status_for(exc: LifecycleError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def lifecycle_error_handler(request: Request, exc: LifecycleError) -> JSONResponse:
    """Render a typed lifecycle failure as ``{"kind", "detail", "article"}``."""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    body = ErrorResponse(kind=exc.kind, detail=exc.message, article=exc.snapshot)
    headers = {"Retry-After": "1"} if isinstance(exc, StorageUnavailableError) else None
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"), headers=headers)


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LifecycleError, lifecycle_error_handler)

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "article_lifecycle.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
