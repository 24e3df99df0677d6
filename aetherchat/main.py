"""
FastAPI application for the AetherChat scheduling backend

Booking, session packages and settings over HTTP; reminders and the
end-of-day sweep run in the Celery worker
"""
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from contextlib import asynccontextmanager

from aetherchat.config.settings import get_settings
from aetherchat.core.middleware import correlation_id_middleware, request_logging_middleware
from aetherchat.core.monitoring import health_router
from aetherchat.api.v1.router import api_v1_router
from aetherchat.services.registry import ServiceRegistry, build_registry
from aetherchat.utils.my_logging import setup_logging

logger = logging.getLogger(__name__)

settings = get_settings()


def create_app(registry: ServiceRegistry = None) -> FastAPI:
    """Create and configure FastAPI application"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        # Startup
        setup_logging()
        app.state.registry = registry or build_registry(settings)

        routes = sorted(
            (route.path, ",".join(sorted(route.methods)))
            for route in app.routes if isinstance(route, APIRoute)
        )
        logger.info(f"{settings.APP_NAME} API starting up with {len(routes)} routes")
        for path, methods in routes:
            logger.debug(f"  {methods:12} {path}")

        yield

        # Shutdown
        logger.info(f"{settings.APP_NAME} API shutting down...")

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Scheduling, session packages and reminders for a live-chat support platform",
        version=settings.APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "PUT"],
        allow_headers=["*"],
    )

    # Add custom middleware (last registered runs first)
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    # Include routers
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "service": f"{settings.APP_NAME} API",
            "version": settings.APP_VERSION,
            "status": "running",
            "endpoints": {
                "api": "/api/v1/",
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "aetherchat.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
