"""
Test suite for dependency injection container.

Tests that ServiceCache builds every component once from settings,
shares the store and embedding adapter between services, and resets
on close. Model backends are never contacted.

System role: Verification of DI container
"""

import pytest

from vectorqa.api.deps import (
    ServiceCache,
    get_ingestion_service,
    get_query_service,
    get_service_cache,
    get_vector_index_store,
)
from vectorqa.application.services import IngestionService, QueryService
from vectorqa.configs import Settings
from vectorqa.configs.chunking import ChunkingSettings
from vectorqa.configs.models import ModelSettings
from vectorqa.configs.vector_store import VectorStoreSettings


@pytest.fixture
def settings() -> Settings:
    """Provide settings pointing at an in-memory database."""
    return Settings(
        chunking=ChunkingSettings(chunk_size=300),
        models=ModelSettings(questions_per_chunk=2, embedding_dimension=64),
        vector_store=VectorStoreSettings(database_url="sqlite+aiosqlite:///:memory:", top_k=7),
    )


@pytest.fixture
def cache(settings: Settings) -> ServiceCache:
    """Provide fresh service cache."""
    return ServiceCache(settings)


class TestServiceCache:
    """Test suite for ServiceCache."""

    def test_query_service_should_be_built_once(self, cache: ServiceCache) -> None:
        # Act
        first = cache.query_service
        second = cache.query_service

        # Assert
        assert isinstance(first, QueryService)
        assert first is second

    def test_services_should_share_store_and_embedding_adapter(self, cache: ServiceCache) -> None:
        # Act
        query_service = cache.query_service
        ingestion_service = cache.ingestion_service

        # Assert
        assert isinstance(ingestion_service, IngestionService)
        assert ingestion_service.store is cache.store
        assert query_service.retrieval_engine._store is cache.store
        assert query_service.retrieval_engine._embedding is cache.embedding_adapter

    def test_components_should_follow_settings(self, cache: ServiceCache) -> None:
        # Act
        engine = cache.query_service.retrieval_engine

        # Assert
        assert engine.default_top_k == 7
        assert engine.default_threshold == 0.3
        assert cache.question_synthesizer.questions_per_chunk == 2
        assert cache.embedding_adapter.model_version == "models/gemini-embedding-001@64"
        assert cache.answer_synthesizer.default_max_answer_length == 800

    def test_building_services_should_not_initialize_models(self, cache: ServiceCache) -> None:
        # Act
        cache.query_service
        cache.ingestion_service

        # Assert
        assert cache.embedding_adapter.is_initialized is False
        assert cache.question_synthesizer.is_initialized is False

    @pytest.mark.asyncio
    async def test_close_should_dispose_and_reset(self, cache: ServiceCache) -> None:
        # Arrange
        store = cache.store
        await store.create_tables()

        # Act
        await cache.close()

        # Assert
        assert cache.store is not store


class TestDependencyFactories:
    def test_factories_should_use_global_cache(self, settings: Settings, monkeypatch) -> None:
        # Arrange
        global_cache = get_service_cache()
        monkeypatch.setattr(global_cache, "_settings", settings)
        global_cache.clear()

        try:
            # Act & Assert
            assert get_query_service() is global_cache.query_service
            assert get_ingestion_service() is global_cache.ingestion_service
            assert get_vector_index_store() is global_cache.store
        finally:
            global_cache.clear()
