"""
Vector store configuration settings.

Database location for the chunk index and retrieval defaults.

Dependencies: pydantic, pydantic_settings
System role: Vector Index Store and Retrieval Engine configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (SQLite via aiosqlite by default)."""

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./vectorqa.db",
        description="SQLAlchemy async database URL for the chunk index",
    )
    echo_sql: bool = Field(default=False, description="Log SQL statements")

    top_k: int = Field(default=5, ge=1, description="Number of top results to retrieve")
    similarity_threshold: float = Field(
        default=0.3,
        ge=-1.0,
        le=1.0,
        description="Minimum fused cosine score for retrieval (-1.0 to 1.0)",
    )
    max_answer_length: int = Field(
        default=800,
        gt=0,
        description="Default target answer length in characters",
    )
