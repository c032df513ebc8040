"""
Health check API endpoints.

Routes: GET /health

Dependencies: vectorqa.boundary.vdb
System role: Health check HTTP API
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from vectorqa.api.deps import get_vector_index_store
from vectorqa.boundary.vdb.vector_index_store import VectorIndexStore
from vectorqa.models.common import ErrorResponse, HealthResponse
from vectorqa.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check(store: VectorIndexStore = Depends(get_vector_index_store)):
    """Report liveness and the number of indexed chunks."""
    try:
        documents = await store.count()
    except Exception as e:
        log_exception_with_context(logger, f"{__name__}:health_check - Store unreachable", e)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=ErrorResponse(error="Vector store unavailable").model_dump(),
        )
    return HealthResponse(
        status="healthy",
        documents=documents,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
