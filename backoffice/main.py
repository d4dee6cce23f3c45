"""
FastAPI Application

Main entry point for the Portfolio CMS back-office API.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from redis.exceptions import RedisError

from backoffice.analytics.sessions import SessionTracker
from backoffice.config import get_settings
from backoffice.config.logging import configure_logging
from backoffice.database.connection import close_database, get_session_factory, init_database
from backoffice.gateway.base import ObjectStorage, QueryGateway
from backoffice.gateway.sqlalchemy import SQLAlchemyGateway
from backoffice.gateway.storage import LocalObjectStorage
from backoffice.serving.api.errors import register_exception_handlers
from backoffice.serving.api.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from backoffice.serving.api.routes import (
    actions_router,
    analytics_router,
    entity_routers,
    health_router,
    singleton_routers,
    tracking_router,
)
from backoffice.serving.cache import close_redis, init_redis
from backoffice.services.registry import ServiceRegistry

settings = get_settings()
logger = structlog.get_logger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting Portfolio CMS back-office API")

    owns_database = app.state.gateway is None
    if owns_database:
        await init_database()
        app.state.gateway = SQLAlchemyGateway(get_session_factory())
        logger.info("Database initialized")

    if app.state.storage is None:
        app.state.storage = LocalObjectStorage(
            root_dir=settings.storage.root_dir,
            public_base_url=settings.storage.public_base_url,
        )

    app.state.registry = ServiceRegistry(app.state.gateway, app.state.storage)

    try:
        await init_redis()
    except RedisError as e:
        logger.warning(f"Redis init failed, analytics caching disabled: {e}")

    yield

    logger.info("Shutting down...")
    await close_redis()
    if owns_database:
        await close_database()


def create_app(
    gateway: Optional[QueryGateway] = None,
    storage: Optional[ObjectStorage] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        gateway: Query gateway to use instead of the configured database
        storage: Object storage to use instead of the local filesystem

    Returns:
        FastAPI: The configured application
    """
    app = FastAPI(
        title="Portfolio CMS Back-Office API",
        description="Content management and visitor analytics for a multilingual portfolio",
        version=settings.version,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.gateway = gateway
    app.state.storage = storage
    app.state.sessions = SessionTracker()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.security.tracking_rate_limit,
        window_seconds=settings.security.tracking_rate_window_seconds,
        path_prefixes=(f"{API_PREFIX}/track",),
    )

    register_exception_handlers(app)

    app.include_router(health_router, prefix=API_PREFIX, tags=["Health"])
    app.include_router(actions_router, prefix=API_PREFIX, tags=["Actions"])
    for name, router in entity_routers().items():
        app.include_router(router, prefix=f"{API_PREFIX}/{name}", tags=[name])
    for name, router in singleton_routers().items():
        app.include_router(router, prefix=f"{API_PREFIX}/{name}", tags=[name])
    app.include_router(analytics_router, prefix=f"{API_PREFIX}/analytics", tags=["Analytics"])
    app.include_router(tracking_router, prefix=f"{API_PREFIX}/track", tags=["Tracking"])

    @app.get(f"{API_PREFIX}/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": "Portfolio CMS Back-Office API",
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": "/docs",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
