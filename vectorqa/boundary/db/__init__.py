"""
Database boundary layer: ORM models and connection management.

Exports:
  - Base, CreatedAtMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(): Async connection management
  - ChunkModel, IndexGenerationModel: Chunk index tables

Dependencies: sqlalchemy, vectorqa.configs
System role: Persistent storage for the chunk index
"""

from vectorqa.boundary.db.base import Base, CreatedAtMixin
from vectorqa.boundary.db.chunk_model import ChunkModel
from vectorqa.boundary.db.connection import get_async_engine, get_async_session_factory
from vectorqa.boundary.db.index_generation_model import GENERATION_ROW_ID, IndexGenerationModel

__all__ = [
    "Base",
    "CreatedAtMixin",
    "ChunkModel",
    "IndexGenerationModel",
    "GENERATION_ROW_ID",
    "get_async_engine",
    "get_async_session_factory",
]
