"""
Per-source ingestion pipeline.

Indexes one extracted source: split -> normalize -> embed chunks ->
synthesize questions -> normalize -> embed questions -> persist. Every
backend call is awaited in order; a source's chunks are written in one
atomic insert, so a failed source leaves nothing behind.

Dependencies: vectorqa.core.chunking, vectorqa.core.indexing.question_synthesizer,
    vectorqa.boundary.models, vectorqa.boundary.vdb
System role: Ingestion orchestration for a single source
"""

import logging
import time

from pydantic import ValidationError as PydanticValidationError

from vectorqa.boundary.models.embedding_adapter import EmbeddingAdapter
from vectorqa.boundary.vdb.vector_index_store import VectorIndexStore
from vectorqa.core.chunking.chunk_splitter import ChunkSplitter
from vectorqa.core.exceptions import IngestionError, ModelUnavailableError, VectorStoreError
from vectorqa.core.indexing.question_synthesizer import QuestionSynthesizer, select_questions
from vectorqa.core.text_normalizer import normalize_batch
from vectorqa.models.chunk import ChunkRecord, TextChunk
from vectorqa.models.ingestion import IngestResult, SourceDocument
from vectorqa.models.metadata import (
    METADATA_VARIANTS,
    BaseChunkMetadata,
    ChunkingStrategy,
    variant_fields,
)
from vectorqa.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


def build_chunk_metadata(
    source: SourceDocument,
    chunk: TextChunk,
    strategy: ChunkingStrategy,
    total_chunks: int,
    embedding_model: str,
) -> BaseChunkMetadata:
    """
    Build the tagged metadata variant for one chunk.

    Keys of source.metadata_extra that belong to the variant become typed
    fields; everything else is kept in the open ``extra`` map.

    Raises:
        pydantic.ValidationError: Variant fields missing or invalid
    """
    typed_keys = variant_fields(source.source_type)
    typed = {k: v for k, v in source.metadata_extra.items() if k in typed_keys}
    extra = {k: v for k, v in source.metadata_extra.items() if k not in typed_keys}
    return METADATA_VARIANTS[source.source_type](
        chunking_strategy=strategy,
        embedding_model=embedding_model,
        chunk_index=chunk.chunk_index,
        total_chunks=total_chunks,
        char_start=chunk.char_start,
        char_end=chunk.char_end,
        extra=extra,
        **typed,
    )


class IngestionPipeline:
    """Index one source at a time into the vector index store."""

    def __init__(
        self,
        store: VectorIndexStore,
        embedding_adapter: EmbeddingAdapter,
        question_synthesizer: QuestionSynthesizer,
        splitter: ChunkSplitter,
        use_semantic_chunking: bool = False,
    ) -> None:
        self._store = store
        self._embedding = embedding_adapter
        self._questions = question_synthesizer
        self._splitter = splitter
        self._use_semantic_chunking = use_semantic_chunking

    async def ingest(self, source: SourceDocument) -> IngestResult:
        """
        Index one source, converting failure into a result.

        Args:
            source: Extracted source text with metadata

        Returns:
            IngestResult: success with chunk count, or failure with error message
        """
        try:
            chunks_created = await self.index_source(source)
        except IngestionError as e:
            log_exception_with_context(
                logger,
                f"{__name__}:ingest - Source failed: {e.message}",
                e,
                source_id=source.source_id,
            )
            return IngestResult(source_id=source.source_id, success=False, error=e.message)
        return IngestResult(source_id=source.source_id, success=True, chunks_created=chunks_created)

    async def index_source(self, source: SourceDocument) -> int:
        """
        Index one source.

        Args:
            source: Extracted source text with metadata

        Returns:
            int: Number of chunks persisted

        Raises:
            IngestionError: No content, embedding backend failure, invalid
                metadata or storage failure
        """
        start_time = time.perf_counter()
        source_id = source.source_id
        logger.info(f"{__name__}:index_source - START source_id={source_id}, chars={len(source.text)}")

        # Step 1: Split
        chunks, strategy = await self._splitter.split(source.text, semantic=self._use_semantic_chunking)
        if not chunks:
            raise IngestionError("No content", source_id=source_id)
        logger.info(f"{__name__}:index_source - Step 1 OK: {len(chunks)} chunks ({strategy.value})")

        # Step 2: Content embeddings
        try:
            content_vectors = await self._embedding.embed(normalize_batch([chunk.text for chunk in chunks]))
        except ModelUnavailableError as e:
            raise IngestionError(f"Embedding failed: {e.message}", source_id=source_id, cause=e) from e
        logger.info(f"{__name__}:index_source - Step 2 OK: {len(content_vectors)} content vectors")

        # Step 3: Questions and question embeddings, chunk by chunk
        await self._initialize_questions(source_id)
        records: list[ChunkRecord] = []
        question_total = 0
        for chunk, vector in zip(chunks, content_vectors):
            questions, question_vectors = await self._questions_for(source, chunk)
            question_total += len(questions)
            try:
                metadata = build_chunk_metadata(
                    source, chunk, strategy, len(chunks), self._embedding.model_version
                )
                records.append(
                    ChunkRecord(
                        source_id=source_id,
                        source_text=source.text,
                        chunk_text=chunk.text,
                        chunk_index=chunk.chunk_index,
                        chunk_size=len(chunk.text),
                        embedding=vector,
                        questions=questions,
                        question_embeddings=question_vectors,
                        metadata=metadata,
                        embedding_model=self._embedding.model_version,
                    )
                )
            except PydanticValidationError as e:
                raise IngestionError("Invalid chunk metadata", source_id=source_id, cause=e) from e
        logger.info(f"{__name__}:index_source - Step 3 OK: {question_total} questions")

        # Step 4: Persist atomically
        try:
            await self._store.insert_many(records)
        except VectorStoreError as e:
            raise IngestionError(f"Storage failed: {e.message}", source_id=source_id, cause=e) from e

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{__name__}:index_source - END source_id={source_id}, chunks={len(records)}, "
            f"elapsed_ms={elapsed_ms:.0f}"
        )
        return len(records)

    async def _initialize_questions(self, source_id: str) -> None:
        try:
            await self._questions.initialize()
        except ModelUnavailableError as e:
            logger.warning(
                f"{__name__}:index_source - Question backend unavailable, indexing {source_id} "
                f"without questions: {e.message}"
            )

    async def _questions_for(self, source: SourceDocument, chunk: TextChunk) -> tuple[list[str], list[list[float]]]:
        if source.questions is not None:
            questions = select_questions(source.questions, self._questions.questions_per_chunk)
        else:
            questions = await self._questions.generate_or_empty(
                chunk.text, source_id=source.source_id, chunk_index=chunk.chunk_index
            )
        if not questions:
            return [], []

        try:
            vectors = await self._embedding.embed(normalize_batch(questions))
        except ModelUnavailableError as e:
            logger.warning(
                f"{__name__}:index_source - Question embedding failed for {source.source_id}"
                f"#{chunk.chunk_index}, indexing without questions: {e.message}"
            )
            return [], []
        return questions, vectors
