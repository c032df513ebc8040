"""
Dependency injection container.

Builds every long-lived component once and exposes FastAPI dependency
factories for the routers.

Dependencies: vectorqa.configs, vectorqa.core, vectorqa.boundary, vectorqa.application
System role: DI container for service injection
"""

from vectorqa.application.services.ingestion_service import IngestionService
from vectorqa.application.services.query_service import QueryService
from vectorqa.boundary.models.chat_models import build_chat_model
from vectorqa.boundary.models.embedding_adapter import EmbeddingAdapter, build_default_embedding_adapter
from vectorqa.boundary.vdb.vector_index_store import VectorIndexStore
from vectorqa.configs import Settings, get_settings
from vectorqa.core.answering.answer_synthesizer import AnswerSynthesizer
from vectorqa.core.chunking.chunk_splitter import ChunkSplitter
from vectorqa.core.indexing.ingestion_pipeline import IngestionPipeline
from vectorqa.core.indexing.question_synthesizer import QuestionSynthesizer
from vectorqa.core.retrieval.retrieval_engine import RetrievalEngine


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._store: VectorIndexStore | None = None
        self._embedding_adapter: EmbeddingAdapter | None = None
        self._question_synthesizer: QuestionSynthesizer | None = None
        self._answer_synthesizer: AnswerSynthesizer | None = None
        self._query_service: QueryService | None = None
        self._ingestion_service: IngestionService | None = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def store(self) -> VectorIndexStore:
        """Get cached vector index store."""
        if self._store is None:
            self._store = VectorIndexStore.from_url(
                self.settings.vector_store.database_url,
                echo=self.settings.vector_store.echo_sql,
            )
        return self._store

    @property
    def embedding_adapter(self) -> EmbeddingAdapter:
        """Get cached embedding adapter (backend initialized on first embed)."""
        if self._embedding_adapter is None:
            self._embedding_adapter = build_default_embedding_adapter(self.settings)
        return self._embedding_adapter

    @property
    def question_synthesizer(self) -> QuestionSynthesizer:
        """Get cached question synthesizer."""
        if self._question_synthesizer is None:
            models = self.settings.models

            async def factory():
                return build_chat_model(models.chat_model, temperature=models.question_temperature)

            self._question_synthesizer = QuestionSynthesizer(
                factory,
                questions_per_chunk=models.questions_per_chunk,
                timeout_seconds=models.question_timeout_seconds,
            )
        return self._question_synthesizer

    @property
    def answer_synthesizer(self) -> AnswerSynthesizer:
        """Get cached answer synthesizer."""
        if self._answer_synthesizer is None:
            models = self.settings.models

            async def factory():
                return build_chat_model(models.chat_model, temperature=models.temperature)

            self._answer_synthesizer = AnswerSynthesizer(
                factory,
                default_max_answer_length=self.settings.vector_store.max_answer_length,
                answer_timeout_seconds=models.answer_timeout_seconds,
                token_timeout_seconds=models.stream_token_timeout_seconds,
            )
        return self._answer_synthesizer

    @property
    def query_service(self) -> QueryService:
        """Get cached query service."""
        if self._query_service is None:
            store_settings = self.settings.vector_store
            engine = RetrievalEngine(
                self.store,
                self.embedding_adapter,
                default_top_k=store_settings.top_k,
                default_threshold=store_settings.similarity_threshold,
            )
            self._query_service = QueryService(engine, self.answer_synthesizer)
        return self._query_service

    @property
    def ingestion_service(self) -> IngestionService:
        """Get cached ingestion service."""
        if self._ingestion_service is None:
            chunking = self.settings.chunking
            splitter = ChunkSplitter(
                chunk_size=chunking.chunk_size,
                max_chunks=chunking.max_chunks_per_source,
                semantic_drift_threshold=chunking.semantic_drift_threshold,
                sentence_embedder=self.embedding_adapter.embed,
            )
            pipeline = IngestionPipeline(
                self.store,
                self.embedding_adapter,
                self.question_synthesizer,
                splitter,
                use_semantic_chunking=chunking.use_semantic_chunking,
            )
            self._ingestion_service = IngestionService(pipeline, self.store)
        return self._ingestion_service

    async def close(self) -> None:
        """Dispose the database engine and clear all cached instances."""
        if self._store is not None:
            await self._store.dispose()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._store = None
        self._embedding_adapter = None
        self._question_synthesizer = None
        self._answer_synthesizer = None
        self._query_service = None
        self._ingestion_service = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_vector_index_store() -> VectorIndexStore:
    """Get the shared vector index store."""
    return get_service_cache().store


def get_query_service() -> QueryService:
    """Get the shared query service."""
    return get_service_cache().query_service


def get_ingestion_service() -> IngestionService:
    """Get the shared ingestion service."""
    return get_service_cache().ingestion_service
