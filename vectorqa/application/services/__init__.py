"""Application services."""

from vectorqa.application.services.ingestion_service import IngestionService
from vectorqa.application.services.merge_service import MergeService
from vectorqa.application.services.query_service import QueryService

__all__ = ["IngestionService", "MergeService", "QueryService"]
