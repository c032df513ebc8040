"""
Ingestion API endpoint.

Routes:
- POST /ingest - Index a batch of already-extracted sources

Dependencies: vectorqa.application.services.ingestion_service
System role: Batch ingestion HTTP API
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from vectorqa.api.deps import get_ingestion_service
from vectorqa.api.routers.router_utils import error_response
from vectorqa.application.services.ingestion_service import IngestionService
from vectorqa.models.common import ErrorResponse
from vectorqa.models.ingestion import IngestionSummary, IngestMode, SourceDocument

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ingest"])


class IngestRequest(BaseModel):
    """Batch ingestion request."""

    sources: list[SourceDocument] = Field(min_length=1)
    mode: IngestMode = IngestMode.APPEND


@router.post(
    "/ingest",
    response_model=IngestionSummary,
    responses={500: {"model": ErrorResponse}},
)
async def ingest(
    request: IngestRequest,
    ingestion_service: IngestionService = Depends(get_ingestion_service),
):
    """Index sources sequentially; per-source failures are reported in the summary.

    Args:
        request: Sources and ingestion mode
        ingestion_service: Injected IngestionService

    Returns:
        IngestionSummary: Per-source results and totals
    """
    logger.info(f"{__name__}:ingest - START sources={len(request.sources)}, mode={request.mode.value}")
    try:
        return await ingestion_service.ingest_batch(request.sources, mode=request.mode)
    except Exception as e:
        return error_response(e, "ingest")
