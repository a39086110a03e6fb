"""FastAPI application setup and configuration."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware.error_handler import setup_exception_handlers
from src.api.middleware.logging import RequestLoggingMiddleware, setup_logging
from src.api.middleware.rate_limit import RateLimitMiddleware
from src.jobs.scheduler import JobScheduler
from src.modules.resilience import RateLimiter
from src.shared.config import get_settings
from src.shared.service_registry import ServiceRegistry

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Builds the service registry unless one was injected, starts the
    background jobs when enabled, and releases everything on shutdown.
    """
    # Startup
    setup_logging(settings)
    owns_registry = getattr(app.state, "registry", None) is None
    if owns_registry:
        app.state.registry = ServiceRegistry.create(settings)
    registry: ServiceRegistry = app.state.registry

    scheduler = JobScheduler()
    scheduler.schedule_session_cleanup(
        registry.session_store,
        interval_minutes=registry.settings.session_cleanup_interval_minutes,
    )
    scheduler.schedule_rate_limit_prune(registry.rate_limiter)
    scheduler.start()
    app.state.scheduler = scheduler

    yield

    # Shutdown
    scheduler.shutdown(wait=False)
    if owns_registry:
        await registry.dispose()
        app.state.registry = None


def create_app(registry: ServiceRegistry | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        registry: Pre-built services. When omitted, the lifespan builds them
            from settings on startup and disposes them on shutdown.

    Returns:
        Configured FastAPI application instance
    """
    application = FastAPI(
        title="Assessment Insights API",
        description="""
        Sales assessment API:
        - Assessment sessions of twelve responses
        - AI-generated insights after each batch of responses
        - Final scoring with skill levels, challenges and recommendations
        """,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    application.state.registry = registry

    cors_origins = settings.cors_origins_list

    # Security: Warn if no CORS origins configured in production
    if settings.is_production and not cors_origins:
        logger.warning(
            "No CORS_ORIGINS configured in production. "
            "API will not be accessible from browsers. "
            "Set CORS_ORIGINS env variable to allow frontend access."
        )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Accept",
            "Origin",
            "X-Requested-With",
            "X-Request-ID",
        ],
        max_age=600,  # 10 minutes
    )

    setup_exception_handlers(application)

    # Rate limiting runs before logging to avoid logging rate limited requests
    application.add_middleware(
        RateLimitMiddleware,
        limiter=registry.rate_limiter if registry else RateLimiter(),
    )
    application.add_middleware(RequestLoggingMiddleware)

    from src.api.routers import (
        assessments_router,
        health_router,
        insights_router,
    )

    application.include_router(
        health_router,
        prefix="/health",
        tags=["Health"],
    )
    application.include_router(
        assessments_router,
        prefix="/assessments",
        tags=["Assessments"],
    )
    application.include_router(
        insights_router,
        prefix="/insights",
        tags=["Insights"],
    )

    return application


# Create app instance
app = create_app()
