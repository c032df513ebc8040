"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, vectorqa.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vectorqa.api.deps.dependencies import get_service_cache
from vectorqa.configs import get_settings
from vectorqa.observability.logger import configure_logging
from vectorqa.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware
from .routers import ask_router, health_router, ingest_router, search_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Creates the index tables on startup and disposes the engine on shutdown.
    Model backends initialize lazily on first use.
    """
    configure_logging()

    # Startup
    cache = get_service_cache()
    await cache.store.create_tables()
    logger.info(
        f"{__name__}:lifespan - Vector index ready "
        f"({await cache.store.count()} chunks, environment={get_settings().environment})"
    )

    yield

    # Shutdown
    await cache.close()
    logger.info(f"{__name__}:lifespan - Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = get_settings()
    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Dual-vector retrieval-augmented question answering",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(search_router, prefix="/api/v1")
    app.include_router(ask_router, prefix="/api/v1")
    app.include_router(ingest_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "vectorqa.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
