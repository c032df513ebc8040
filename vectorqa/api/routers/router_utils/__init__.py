"""
Router utility functions.

Contains helper functions extracted from router endpoints to keep them clean.
"""

from vectorqa.api.routers.router_utils.error_utils import error_response, error_status, format_sse

__all__ = ["error_response", "error_status", "format_sse"]
