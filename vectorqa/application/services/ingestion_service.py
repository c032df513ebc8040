"""
Batch ingestion service.

Runs the ingestion pipeline over a batch of sources, one at a time.
A failing source is recorded and the batch continues; the run always
ends with a full summary.

Modes:
- CLEAR: wipe the index, then ingest everything
- RESUME: skip sources that already have chunks in the index
- APPEND: ingest everything into the existing index

Dependencies: vectorqa.core.indexing, vectorqa.boundary.vdb
System role: Ingestion run orchestration
"""

import logging
import time
from collections.abc import AsyncIterable, Iterable

from vectorqa.boundary.vdb.vector_index_store import VectorIndexStore
from vectorqa.core.indexing.ingestion_pipeline import IngestionPipeline
from vectorqa.models.ingestion import IngestionSummary, IngestMode, IngestResult, SourceDocument

logger = logging.getLogger(__name__)


class IngestionService:
    """Ingest batches of sources into the vector index."""

    def __init__(self, pipeline: IngestionPipeline, store: VectorIndexStore) -> None:
        self.pipeline = pipeline
        self.store = store

    async def ingest_source(self, source: SourceDocument) -> IngestResult:
        """Ingest one source; failures are returned, not raised."""
        return await self.pipeline.ingest(source)

    async def ingest_batch(
        self,
        sources: Iterable[SourceDocument] | AsyncIterable[SourceDocument],
        mode: IngestMode = IngestMode.CLEAR,
    ) -> IngestionSummary:
        """
        Ingest sources sequentially.

        Args:
            sources: Sources in processing order (sync or async iterable)
            mode: How to treat the existing index

        Returns:
            IngestionSummary: Per-source results with success/failed/skipped totals

        Raises:
            VectorStoreError: CLEAR mode could not clear the index
        """
        start_time = time.perf_counter()
        summary = IngestionSummary()

        if mode == IngestMode.CLEAR:
            logger.info(f"{__name__}:ingest_batch - Clearing index before ingestion")
            await self.store.clear()

        async for source in _aiter(sources):
            if mode == IngestMode.RESUME and await self.store.has_source(source.source_id):
                logger.info(f"{__name__}:ingest_batch - Skipping already indexed source {source.source_id}")
                summary.add(IngestResult(source_id=source.source_id, success=True, skipped=True))
                continue
            summary.add(await self.pipeline.ingest(source))

        summary.took_ms = round((time.perf_counter() - start_time) * 1000, 2)
        logger.info(
            f"{__name__}:ingest_batch - END successful={summary.successful}, failed={summary.failed}, "
            f"skipped={summary.skipped}, total_chunks={summary.total_chunks}"
        )
        return summary


async def _aiter(sources: Iterable[SourceDocument] | AsyncIterable[SourceDocument]):
    if hasattr(sources, "__aiter__"):
        async for source in sources:
            yield source
    else:
        for source in sources:
            yield source
