"""
Question answering request/response models.

Dependencies: pydantic
System role: Answer API schemas
"""

from pydantic import BaseModel, Field


class Citation(BaseModel):
    """Source chunk an answer drew from."""

    source_id: str
    chunk_index: int
    score: float
    snippet: str = Field(description="First 200 characters of the chunk")


class AnswerResult(BaseModel):
    """Full synthesized answer with citations."""

    answer: str
    citations: list[Citation] = Field(default_factory=list)


class AskRequest(BaseModel):
    """Question answering request."""

    question: str = Field(min_length=1, description="User question, passed verbatim to the model")
    top_k: int | None = Field(default=None, ge=1, le=100)
    similarity_threshold: float | None = Field(default=None, ge=-1.0, le=1.0)
    max_answer_length: int | None = Field(default=None, gt=0, description="Target answer length in characters")
    system_prompt: str | None = Field(default=None, description="Override for the default system prompt")


class AskResponse(AnswerResult):
    """Question answering response."""

    took_ms: float
