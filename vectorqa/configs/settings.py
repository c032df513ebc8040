"""
Unified application settings.

Combines the chunking, model, vector store and observability sections
into one object and checks the rules that span more than one section.

Dependencies: pydantic, vectorqa.configs sections
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import model_validator

from vectorqa.configs.base import BaseSettings
from vectorqa.configs.chunking import ChunkingSettings
from vectorqa.configs.models import ModelSettings
from vectorqa.configs.observability import ObservabilitySettings
from vectorqa.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    """All vectorqa settings sections."""

    chunking: ChunkingSettings = ChunkingSettings()
    models: ModelSettings = ModelSettings()
    vector_store: VectorStoreSettings = VectorStoreSettings()
    observability: ObservabilitySettings = ObservabilitySettings()

    @model_validator(mode="after")
    def check_cross_section_rules(self) -> "Settings":
        """
        Reject combinations no single section can detect.

        Raises:
            ValueError: If production points at an in-memory index
        """
        if self.environment == "production" and ":memory:" in self.vector_store.database_url:
            raise ValueError("An in-memory vector index cannot be used in production")
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Load settings once per process.

    Returns:
        Settings: Cached settings instance
    """
    return Settings()
