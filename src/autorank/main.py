"""FastAPI application exposing job control and data preview."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from autorank.api.v1.router import api_router
from autorank.config import Settings, get_settings
from autorank.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
)
from autorank.core.logging import get_logger, setup_logging
from autorank.core.security import security_headers_middleware
from autorank.dependencies import peek_job_manager

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log the target portal on startup; stop the running job on shutdown.

    A job still running at shutdown is asked to stop at its next batch
    boundary, then cancelled once ``JobManager.shutdown_timeout`` elapses. The
    browser it holds is closed either way.
    """
    settings = get_settings()
    logger.info(
        f"Starting {settings.app_name} API v{settings.app_version} "
        f"({settings.environment}), portal: {settings.portal_login_url}"
    )
    yield

    job_manager = peek_job_manager()
    if job_manager is not None:
        if job_manager.is_running:
            logger.warning("Shutdown requested while a job is running, stopping it")
        await job_manager.aclose()
    logger.info(f"{settings.app_name} API stopped")


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_credentials,
        allow_methods=settings.cors_methods,
        allow_headers=settings.cors_headers,
    )
    app.middleware("http")(security_headers_middleware)


def _register_exception_handlers(app: FastAPI) -> None:
    # Precondition, conflict and data source errors carry their own status codes.
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the AutoRank API.

    Args:
        settings: Settings to use; the cached settings when omitted.

    Returns:
        FastAPI: Application with the v1 routers mounted under ``api_v1_prefix``.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Semi-automated bulk catalog upload to the Rank 2 portal",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    _configure_middleware(app, settings)
    _register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    return app


app = create_app()
