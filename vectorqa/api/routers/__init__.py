"""API routers."""

from .ask import router as ask_router
from .health import router as health_router
from .ingest import router as ingest_router
from .search import router as search_router

__all__ = [
    "ask_router",
    "health_router",
    "ingest_router",
    "search_router",
]
