"""
Search request/response models.

Dependencies: pydantic
System role: Retrieval API schemas
"""

from typing import Any

from pydantic import BaseModel, Field


class SearchRequest(BaseModel):
    """Similarity search request."""

    query: str = Field(min_length=1, description="Query text")
    top_k: int | None = Field(default=None, ge=1, le=100, description="Maximum results")
    similarity_threshold: float | None = Field(
        default=None,
        ge=-1.0,
        le=1.0,
        description="Minimum fused score",
    )


class SearchResult(BaseModel):
    """One ranked chunk."""

    id: int
    chunk_text: str
    source_id: str
    score: float = Field(description="Fused score: max(content, best question)")
    chunk_index: int
    metadata: dict[str, Any] = Field(default_factory=dict)
    content_score: float | None = None
    question_score: float | None = None
    matched_question: str | None = None


class SearchResponse(BaseModel):
    """Similarity search response."""

    results: list[SearchResult]
    query: str
    took_ms: float
