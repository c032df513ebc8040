"""
Model backend configuration settings.

Embedding and chat model identifiers, question synthesis count,
and per-call timeouts for every external model call.

Dependencies: pydantic, pydantic_settings
System role: Embedding Adapter, Question Synthesizer and Answer Synthesizer configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ModelSettings(BaseSettings):
    """Model backend configuration (Google Generative AI by default)."""

    model_config = SettingsConfigDict(
        env_prefix="MODEL_",
        case_sensitive=False,
        extra="ignore",
    )

    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Google Gemini embedding model ID",
    )
    embedding_dimension: int = Field(
        default=768,
        gt=0,
        description="Embedding vector dimension requested from the backend",
    )
    chat_model: str = Field(
        default="gemini-2.5-flash",
        description="Google Gemini chat model used for questions and answers",
    )
    temperature: float = Field(default=0.0, description="Answer model temperature")
    question_temperature: float = Field(
        default=0.7,
        description="Question model temperature (higher for diverse questions)",
    )

    questions_per_chunk: int = Field(
        default=5,
        ge=0,
        description="Hypothetical questions generated per chunk",
    )
    embedding_batch_size: int = Field(default=100, gt=0, description="Texts per embedding call")
    embedding_retry_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts for transient embedding failures",
    )

    embedding_timeout_seconds: float = Field(default=30.0, gt=0, description="Timeout per embedding call")
    question_timeout_seconds: float = Field(default=30.0, gt=0, description="Timeout per question generation call")
    answer_timeout_seconds: float = Field(default=60.0, gt=0, description="Timeout for a full answer")
    stream_token_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout waiting for each streamed answer token",
    )
