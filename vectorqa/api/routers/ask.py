"""Question answering API endpoints.

Routes:
- POST /ask - Answer a question from the indexed chunks
- POST /ask/stream - Stream the answer using Server-Sent Events (SSE)

Dependencies: vectorqa.application.services.query_service
System role: Question answering HTTP API with streaming support
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from vectorqa.api.deps import get_query_service
from vectorqa.api.routers.router_utils import error_response, format_sse
from vectorqa.application.services.query_service import QueryService
from vectorqa.core.answering.answer_stream import AnswerStream
from vectorqa.models.answer import AskRequest, AskResponse
from vectorqa.models.common import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ask", tags=["ask"])

_ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}}


@router.post("", response_model=AskResponse, responses=_ERROR_RESPONSES)
async def ask(
    request: AskRequest,
    query_service: QueryService = Depends(get_query_service),
):
    """Answer a question with citations.

    Args:
        request: Question with optional retrieval and answer parameters
        query_service: Injected QueryService

    Returns:
        AskResponse: Answer, citations and latency
    """
    try:
        return await query_service.ask(request)
    except Exception as e:
        return error_response(e, "ask")


@router.post("/stream", responses=_ERROR_RESPONSES)
async def ask_stream(
    request: AskRequest,
    query_service: QueryService = Depends(get_query_service),
):
    """Stream an answer using Server-Sent Events (SSE).

    Retrieval runs before the response starts, so invalid requests and
    retrieval failures get a normal error status. Once streaming, model
    failures arrive as a terminal error event.

    SSE Format:
        event: delta
        data: {"delta": "...", "text": "...", "index": 0}

        event: complete
        data: {"answer": "...", "citations": [...]}

        event: error
        data: {"code": "...", "message": "..."}

    Args:
        request: Question with optional retrieval and answer parameters
        query_service: Injected QueryService

    Returns:
        StreamingResponse: SSE stream of answer events
    """
    try:
        stream = await query_service.ask_stream(request)
    except Exception as e:
        return error_response(e, "ask_stream")

    return StreamingResponse(
        _event_generator(stream),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )


async def _event_generator(stream: AnswerStream) -> AsyncGenerator[str, None]:
    """Relay stream events as SSE frames; closing the response closes the stream."""
    async with stream:
        async for event in stream:
            yield format_sse(event)
    logger.info(f"{__name__}:ask_stream - Stream finished, answer_len={len(stream.answer)}")
