"""
Chunk domain models.

ChunkRecord is the unit persisted in the vector index: one chunk of one
source with its content embedding and its hypothetical questions.

Dependencies: pydantic
System role: Chunk data structures
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, model_validator

from vectorqa.models.metadata import ChunkMetadata


class TextChunk(BaseModel):
    """A contiguous slice of a source produced by the Chunk Splitter."""

    chunk_index: int = Field(ge=0)
    char_start: int = Field(ge=0)
    char_end: int = Field(ge=0)
    text: str


class ChunkRecord(BaseModel):
    """Persisted chunk with dual-vector index data."""

    id: int | None = Field(default=None, description="Store-assigned monotonic identifier")
    source_id: str = Field(min_length=1, description="Source identifier (file name, URL, row key)")
    source_text: str | None = Field(
        default=None,
        description="Full source text the chunk was cut from; None when read without it",
    )
    chunk_text: str = Field(min_length=1, description="Chunk text content")
    chunk_index: int = Field(ge=0)
    chunk_size: int = Field(ge=1)
    embedding: list[float] = Field(min_length=1, description="Content embedding vector")
    questions: list[str] = Field(default_factory=list)
    question_embeddings: list[list[float]] = Field(default_factory=list)
    metadata: ChunkMetadata
    embedding_model: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _check_alignment(self) -> "ChunkRecord":
        if len(self.questions) != len(self.question_embeddings):
            raise ValueError(
                f"questions ({len(self.questions)}) and question_embeddings "
                f"({len(self.question_embeddings)}) must align"
            )
        if self.source_text is not None and self.chunk_text not in self.source_text:
            raise ValueError("chunk_text must be a contiguous substring of source_text")
        return self

    @property
    def dimension(self) -> int:
        """Content embedding dimension."""
        return len(self.embedding)
