"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    ServiceCache,
    get_ingestion_service,
    get_query_service,
    get_service_cache,
    get_vector_index_store,
)

__all__ = [
    "ServiceCache",
    "get_ingestion_service",
    "get_query_service",
    "get_service_cache",
    "get_vector_index_store",
]
