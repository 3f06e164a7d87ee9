"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from app.api.v1.endpoints import health
from app.api.v1.router import api_router
from app.config import settings
from app.database import close_database, init_database
from app.middleware.error_handler import register_exception_handlers
from app.middleware.logging import LoggingMiddleware, configure_logging

# Configure logging
configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Provisions indexes and the role catalog on startup, closes the
    MongoDB client on shutdown.
    """
    logger.info(
        "application_startup",
        environment=settings.environment,
        db_name=settings.db_name,
        api_key_required=settings.api_key_required,
    )
    if not settings.api_key_required:
        logger.warning("api_key_disabled", note="Prefixed routes are open. Set API_KEY to protect them.")

    try:
        await init_database()
        logger.info("database_initialized", skipped=settings.skip_index_seed)
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))

    yield

    logger.info("application_shutdown")
    await close_database()
    logger.info("database_connections_closed")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="REST backend for dental clinic records",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add logging middleware
app.add_middleware(LoggingMiddleware)

register_exception_handlers(app)

# Public routes, then the API
app.include_router(health.router)
app.include_router(api_router, prefix=settings.api_prefix)

# Setup Prometheus instrumentation
Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    should_instrument_requests_inprogress=True,
    excluded_handlers=["/docs", "/redoc", "/openapi.json", "/health", "/metrics"],
    inprogress_name="http_requests_inprogress",
    inprogress_labels=True,
).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


@app.get("/", tags=["Root"])
async def root() -> dict[str, Any]:
    """
    Root endpoint.

    Returns:
        Service information
    """
    return {
        "ok": True,
        "service": settings.app_name,
        "version": settings.app_version,
        "health": "/health",
        "api_base": settings.api_prefix,
        "docs": "/docs",
        "ts": datetime.now(UTC).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
