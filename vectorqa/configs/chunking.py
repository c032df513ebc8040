"""
Chunking configuration settings.

Controls how source text is split before indexing: size cap,
per-source chunk cap and semantic grouping.

Dependencies: pydantic, pydantic_settings
System role: Chunk Splitter configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChunkingSettings(BaseSettings):
    """Chunk splitting configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CHUNKING_",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(
        default=1000,
        gt=0,
        description="Maximum chunk size in characters; shorter sources stay whole",
    )
    use_semantic_chunking: bool = Field(
        default=False,
        description="Group sentences by embedding similarity instead of fixed-size splits",
    )
    semantic_drift_threshold: float = Field(
        default=0.5,
        ge=-1.0,
        le=1.0,
        description="Adjacent-sentence cosine below which a new semantic chunk starts",
    )
    max_chunks_per_source: int = Field(
        default=500,
        gt=0,
        description="Upper bound on chunks kept per source",
    )
