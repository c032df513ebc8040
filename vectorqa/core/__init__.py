"""
Core business logic module.

Contains chunking, question synthesis, ingestion, retrieval and answer
synthesis, plus the exception hierarchy shared across layers.
"""

from vectorqa.core.exceptions import (
    EmbeddingMismatchError,
    IngestionError,
    ModelTimeoutError,
    ModelUnavailableError,
    ValidationError,
    VectorQAException,
    VectorStoreError,
)

__all__ = [
    "VectorQAException",
    "ValidationError",
    "IngestionError",
    "ModelUnavailableError",
    "ModelTimeoutError",
    "VectorStoreError",
    "EmbeddingMismatchError",
]
