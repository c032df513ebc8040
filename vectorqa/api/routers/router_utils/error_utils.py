"""
Router error utilities.

Maps domain exceptions to HTTP responses with a generic error payload.
Internal details are logged, never echoed to the client.

Dependencies: fastapi, vectorqa.core.exceptions
System role: Request-boundary error translation
"""

import json
import logging

from fastapi import status
from fastapi.responses import JSONResponse

from vectorqa.core.exceptions import EmbeddingMismatchError, ModelUnavailableError, ValidationError
from vectorqa.models.common import ErrorResponse
from vectorqa.models.streaming import StreamEvent
from vectorqa.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"
MODEL_UNAVAILABLE_MESSAGE = "Model backend unavailable, retry later"
INDEX_MISMATCH_MESSAGE = "Index was built with a different embedding model, re-index required"


def error_status(exc: Exception) -> tuple[int, str, str]:
    """
    Classify an exception.

    Returns:
        tuple: (HTTP status, error code, client-safe message)
    """
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", exc.message
    if isinstance(exc, ModelUnavailableError):
        return status.HTTP_503_SERVICE_UNAVAILABLE, "MODEL_UNAVAILABLE", MODEL_UNAVAILABLE_MESSAGE
    if isinstance(exc, EmbeddingMismatchError):
        return status.HTTP_503_SERVICE_UNAVAILABLE, "INDEX_MISMATCH", INDEX_MISMATCH_MESSAGE
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "PROCESSING_ERROR", INTERNAL_ERROR_MESSAGE


def error_response(exc: Exception, operation: str) -> JSONResponse:
    """
    Log an exception and build the client response for it.

    Args:
        exc: Exception raised while handling the request
        operation: Endpoint name for the log line

    Returns:
        JSONResponse: ErrorResponse payload with the mapped status code
    """
    status_code, code, message = error_status(exc)
    if status_code >= 500:
        log_exception_with_context(logger, f"{__name__}:{operation} - {code}", exc, operation=operation)
    else:
        logger.info(f"{__name__}:{operation} - {code}: {message}")
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, details={"code": code}).model_dump(),
    )


def format_sse(event: StreamEvent) -> str:
    """Format one event as a Server-Sent Events frame."""
    return f"event: {event.event.value}\ndata: {json.dumps(event.data)}\n\n"
