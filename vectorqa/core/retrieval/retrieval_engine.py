"""
Retrieval engine.

Ranks indexed chunks against a query by fusing two similarities:
the query vs the chunk's content vector, and the query vs the best of
the chunk's hypothetical question vectors. The fused score is the
larger of the two. Results under the threshold are dropped, the rest
ordered by score with a fixed tie-break and cut to top-K.

Every content and question vector is scanned; the FAISS index on the
store covers content vectors only, so it cannot rank question matches.

Dependencies: numpy, vectorqa.boundary.models, vectorqa.boundary.vdb
System role: Query-side ranking for search and answer synthesis
"""

import logging
from dataclasses import dataclass
from datetime import timezone

import numpy as np

from vectorqa.boundary.models.embedding_adapter import EmbeddingAdapter
from vectorqa.boundary.vdb.vector_index_store import VectorIndexStore
from vectorqa.core.exceptions import EmbeddingMismatchError, ValidationError
from vectorqa.core.text_normalizer import normalize_for_embedding
from vectorqa.models.chunk import ChunkRecord
from vectorqa.models.search import SearchResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoredChunk:
    """Fused similarity of one record against a query."""

    record: ChunkRecord
    score: float
    content_score: float
    question_score: float | None
    matched_question: str | None

    def sort_key(self) -> tuple:
        created = self.record.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return (-self.score, self.record.chunk_index, created, self.record.id or 0)

    def to_result(self) -> SearchResult:
        return SearchResult(
            id=self.record.id or 0,
            chunk_text=self.record.chunk_text,
            source_id=self.record.source_id,
            score=self.score,
            chunk_index=self.record.chunk_index,
            metadata=self.record.metadata.model_dump(mode="json"),
            content_score=self.content_score,
            question_score=self.question_score,
            matched_question=self.matched_question,
        )


def _unit(vector: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vector, axis=-1, keepdims=True)
    return np.divide(vector, norm, out=np.zeros_like(vector), where=norm > 0)


def score_record(query_unit: np.ndarray, record: ChunkRecord) -> ScoredChunk:
    """
    Fuse content and question similarity for one record.

    Args:
        query_unit: L2-normalized query vector (float64)
        record: Record whose vectors share the query's dimension

    Returns:
        ScoredChunk: score = max(content, best question); content only when
        the record has no questions
    """
    content = float(np.clip(_unit(np.asarray(record.embedding, dtype=np.float64)) @ query_unit, -1.0, 1.0))

    question_score: float | None = None
    matched: str | None = None
    if record.question_embeddings:
        questions = _unit(np.asarray(record.question_embeddings, dtype=np.float64))
        similarities = np.clip(questions @ query_unit, -1.0, 1.0)
        best = int(np.argmax(similarities))
        question_score = float(similarities[best])
        matched = record.questions[best]

    fused = content if question_score is None else max(content, question_score)
    return ScoredChunk(
        record=record,
        score=fused,
        content_score=content,
        question_score=question_score,
        matched_question=matched,
    )


def validate_search_params(query: str, top_k: int, threshold: float) -> None:
    """
    Raises:
        ValidationError: Empty query, top_k < 1 or threshold outside [-1, 1]
    """
    if not query or not query.strip():
        raise ValidationError("Query must not be empty", field="query")
    if not isinstance(top_k, int) or isinstance(top_k, bool) or top_k < 1:
        raise ValidationError("top_k must be a positive integer", field="top_k")
    if not -1.0 <= threshold <= 1.0:
        raise ValidationError("similarity_threshold must be between -1 and 1", field="similarity_threshold")


def rank_records(
    query_vector: list[float],
    records: list[ChunkRecord],
    top_k: int,
    threshold: float,
) -> list[ScoredChunk]:
    """
    Score, filter, order and truncate records.

    Order: descending fused score, then ascending chunk_index, then
    earlier created_at, then ascending id.

    Args:
        query_vector: Query embedding
        records: Snapshot of the store
        top_k: Maximum results
        threshold: Minimum fused score (inclusive)

    Returns:
        list[ScoredChunk]: At most top_k results, all scoring >= threshold
    """
    query = np.asarray(query_vector, dtype=np.float64)
    query_unit = _unit(query)
    dimension = query.shape[0]

    scored: list[ScoredChunk] = []
    skipped = 0
    for record in records:
        if record.dimension != dimension or any(len(v) != dimension for v in record.question_embeddings):
            skipped += 1
            continue
        candidate = score_record(query_unit, record)
        if candidate.score >= threshold:
            scored.append(candidate)

    if skipped:
        logger.warning(
            f"{__name__}:rank_records - Skipped {skipped} records whose dimension differs from the query ({dimension})"
        )

    scored.sort(key=ScoredChunk.sort_key)
    return scored[:top_k]


class RetrievalEngine:
    """Dual-vector similarity search over the vector index store."""

    def __init__(
        self,
        store: VectorIndexStore,
        embedding_adapter: EmbeddingAdapter,
        default_top_k: int = 5,
        default_threshold: float = 0.3,
    ) -> None:
        self._store = store
        self._embedding = embedding_adapter
        self.default_top_k = default_top_k
        self.default_threshold = default_threshold

    async def search(
        self,
        query: str,
        top_k: int | None = None,
        threshold: float | None = None,
    ) -> list[SearchResult]:
        """
        Rank indexed chunks for a query.

        Args:
            query: Query text (normalized here before embedding)
            top_k: Maximum results (default from settings)
            threshold: Minimum fused score in [-1, 1] (default from settings)

        Returns:
            list[SearchResult]: Possibly empty ranked results

        Raises:
            ValidationError: Invalid query, top_k or threshold
            EmbeddingMismatchError: The index was built with another embedding model
            ModelUnavailableError: Embedding backend failure or timeout
            VectorStoreError: Store read failure
        """
        top_k = self.default_top_k if top_k is None else top_k
        threshold = self.default_threshold if threshold is None else threshold
        validate_search_params(query, top_k, threshold)

        generation = await self._store.generation()
        if generation is None:
            logger.info(f"{__name__}:search - Store is empty")
            return []
        indexed_model, indexed_dimension = generation
        if indexed_model != self._embedding.model_version:
            raise EmbeddingMismatchError(
                indexed_model,
                indexed_dimension,
                self._embedding.model_version,
                self._embedding.dimension,
                operation="search",
            )

        query_vector = await self._embedding.embed_one(normalize_for_embedding(query))
        records = await self._store.scan(with_source_text=False)
        if not records:
            logger.info(f"{__name__}:search - Store is empty")
            return []

        ranked = rank_records(query_vector, records, top_k, threshold)
        logger.info(
            f"{__name__}:search - scanned={len(records)}, returned={len(ranked)}, "
            f"top_k={top_k}, threshold={threshold}"
        )
        return [candidate.to_result() for candidate in ranked]
