"""
Observability module.

Provides structured logging, correlation ID tracking and request middleware.
"""

from vectorqa.observability.correlation import get_correlation_id, set_correlation_id
from vectorqa.observability.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger", "get_correlation_id", "set_correlation_id"]
