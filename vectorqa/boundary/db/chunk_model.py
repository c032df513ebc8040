"""
Chunk ORM model.

One row per indexed chunk: text, content vector, hypothetical questions
with their vectors, and typed metadata. Vectors are stored as JSON arrays.

Dependencies: sqlalchemy
System role: Persistent chunk index table
"""

from typing import Any

from sqlalchemy import JSON, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from vectorqa.boundary.db.base import Base, CreatedAtMixin


class ChunkModel(CreatedAtMixin, Base):
    """
    Indexed chunk row.

    Attributes:
        id: Monotonic integer primary key, never reused
        source_id: Source identifier (file name, URL, row key)
        source_text: Full source text
        chunk_text: Chunk text
        chunk_index: 0-based position within the source
        chunk_size: Characters in chunk_text
        embedding: Content vector
        questions: Hypothetical questions (may be empty)
        question_embeddings: Vectors aligned with questions
        chunk_metadata: Tagged metadata variant as JSON
        embedding_model: Embedding model version that produced the vectors
    """

    __tablename__ = "chunks"
    __table_args__ = (
        UniqueConstraint("source_id", "chunk_index", name="uq_chunks_source_chunk"),
        Index("ix_chunks_source_id", "source_id"),
        # AUTOINCREMENT: ids are never reused, even after clear()
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source_id: Mapped[str] = mapped_column(String(1024), nullable=False)
    source_text: Mapped[str] = mapped_column(Text, nullable=False)
    chunk_text: Mapped[str] = mapped_column(Text, nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    chunk_size: Mapped[int] = mapped_column(Integer, nullable=False)
    embedding: Mapped[list[float]] = mapped_column(JSON, nullable=False)
    questions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    question_embeddings: Mapped[list[list[float]]] = mapped_column(JSON, nullable=False, default=list)
    chunk_metadata: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    embedding_model: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<ChunkModel(id={self.id}, source_id={self.source_id!r}, chunk_index={self.chunk_index})>"
