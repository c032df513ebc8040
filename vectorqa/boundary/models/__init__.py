"""
Model backend adapters: embeddings, chat models and their one-time initialization.
"""

from vectorqa.boundary.models.chat_models import build_chat_model, message_text
from vectorqa.boundary.models.embedding_adapter import (
    EmbeddingAdapter,
    build_default_embedding_adapter,
)
from vectorqa.boundary.models.initializer import OnceInitializer

__all__ = [
    "EmbeddingAdapter",
    "OnceInitializer",
    "build_chat_model",
    "build_default_embedding_adapter",
    "message_text",
]
