"""
Search API endpoint.

Routes:
- POST /search - Rank indexed chunks for a query

Dependencies: vectorqa.application.services.query_service
System role: Similarity search HTTP API
"""

import logging

from fastapi import APIRouter, Depends

from vectorqa.api.deps import get_query_service
from vectorqa.api.routers.router_utils import error_response
from vectorqa.application.services.query_service import QueryService
from vectorqa.models.common import ErrorResponse
from vectorqa.models.search import SearchRequest, SearchResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])


@router.post(
    "/search",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def search(
    request: SearchRequest,
    query_service: QueryService = Depends(get_query_service),
):
    """Rank indexed chunks by fused content/question similarity.

    Args:
        request: Query with optional top_k and similarity_threshold
        query_service: Injected QueryService

    Returns:
        SearchResponse: Ranked results (possibly empty), echoed query and latency
    """
    try:
        return await query_service.search(request)
    except Exception as e:
        return error_response(e, "search")
