"""
Logger configuration.

Provides configured root logger with ISO timestamps and correlation ID injection.

Dependencies: logging (stdlib), vectorqa.configs
System role: Centralized logging configuration
"""

import logging
import sys

from vectorqa.configs import get_settings
from vectorqa.observability.correlation import CorrelationIdFilter

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CORRELATED_FORMAT = "%(asctime)s - %(correlation_id)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    Configure Python logging with ISO timestamp and structured format.

    Args:
        level: Root log level name; defaults to the configured log_level
    """
    settings = get_settings()
    observability = settings.observability

    # Remove any existing handlers to avoid duplicates
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)

    if observability.include_correlation_id:
        handler.addFilter(CorrelationIdFilter())
        fmt = CORRELATED_FORMAT
    else:
        fmt = DEFAULT_FORMAT
    handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))

    root_logger.setLevel((level or settings.log_level).upper())
    root_logger.addHandler(handler)

    # Reduce noise from verbose third-party libraries
    for name in observability.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get configured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        logging.Logger: Configured logger instance
    """
    return logging.getLogger(name)
