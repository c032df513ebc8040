"""
Structured logging helpers.

Context values are rendered as short strings before they reach a record:
embedding vectors become their shape, mappings their key count and long
chunk text is clipped.

Dependencies: logging (stdlib), numpy
System role: Logging helper functions
"""

import logging
from collections.abc import Mapping
from typing import Any

import numpy as np


def safe_log_value(value: Any, max_length: int = 500) -> str:
    """
    Render a value as a bounded string for a log record.

    Args:
        value: Value to render
        max_length: Length above which the text is clipped

    Returns:
        str: Log-safe representation
    """
    if value is None:
        return "None"
    if isinstance(value, np.ndarray):
        text = f"ndarray(shape={value.shape})"
    elif isinstance(value, (list, tuple)):
        text = f"{type(value).__name__}({len(value)} items)"
    elif isinstance(value, Mapping):
        text = f"dict({len(value)} keys)"
    else:
        try:
            text = str(value)
        except Exception as e:
            return f"<unable to log: {type(e).__name__}>"

    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}... (truncated, {len(text)} total)"


def _render_context(context: Mapping[str, Any]) -> dict[str, str]:
    return {key: safe_log_value(val) for key, val in context.items()}


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context,
) -> None:
    """
    Log a message with rendered context attached as record attributes.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: Key-value pairs such as source_id or chunk_index
    """
    logger.log(level, message, extra=_render_context(context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context,
) -> None:
    """
    Log an exception at ERROR with its traceback and context.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception being reported
        **context: Additional context
    """
    extra = _render_context(context)
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    logger.error(message, exc_info=exc, extra=extra)
