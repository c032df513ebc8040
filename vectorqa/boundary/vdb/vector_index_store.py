"""
Vector index store.

Append-only persistence of chunk records with their content vector and
question vectors, backed by SQLAlchemy async sessions. Enforces one
embedding model and dimension per index generation, deduplicates bulk
imports on (source_id, chunk_index) and keeps a lazily built FAISS index
over content vectors for nearest-neighbour lookups.

Writes are serialized per store instance; reads run concurrently and see
a committed snapshot.

Dependencies: sqlalchemy, vectorqa.boundary.db, vectorqa.boundary.vdb.nearest_neighbor_index
System role: Vector Index Store
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.orm import defer

from vectorqa.boundary.db import (
    GENERATION_ROW_ID,
    Base,
    ChunkModel,
    IndexGenerationModel,
    get_async_engine,
    get_async_session_factory,
)
from vectorqa.boundary.vdb.nearest_neighbor_index import NearestNeighborIndex
from vectorqa.core.exceptions import EmbeddingMismatchError, VectorStoreError
from vectorqa.models.chunk import ChunkRecord
from vectorqa.models.ingestion import ImportReport

logger = logging.getLogger(__name__)


class VectorIndexStore:
    """Chunk record store with a secondary cosine index on content vectors."""

    def __init__(self, engine: AsyncEngine) -> None:
        """
        Initialize store on an engine. Call create_tables() before first use.

        Args:
            engine: Async SQLAlchemy engine
        """
        self._engine = engine
        self._session_factory = get_async_session_factory(engine)
        self._write_lock = asyncio.Lock()
        self._index_lock = asyncio.Lock()
        self._nn_index: NearestNeighborIndex | None = None
        self._nn_loaded = False
        self._indexed_ids: set[int] = set()

    @classmethod
    def from_url(cls, database_url: str | None = None, echo: bool | None = None) -> "VectorIndexStore":
        """Create a store for a database URL (settings default if None)."""
        return cls(get_async_engine(database_url, echo=echo))

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def create_tables(self) -> None:
        """Create the chunk and generation tables if missing."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()

    # ------------------------------------------------------------------ writes

    async def insert(self, record: ChunkRecord) -> int:
        """
        Persist one record.

        Args:
            record: Chunk record (its id is ignored)

        Returns:
            int: Generated monotonic id

        Raises:
            EmbeddingMismatchError: Model or dimension differs from the index generation
            VectorStoreError: Duplicate key or storage failure
        """
        return (await self.insert_many([record]))[0]

    async def insert_many(self, records: list[ChunkRecord]) -> list[int]:
        """
        Persist records atomically, in order.

        Returns:
            list[int]: Generated ids in input order

        Raises:
            EmbeddingMismatchError: Model or dimension differs from the index generation
            VectorStoreError: Duplicate key or storage failure
        """
        if not records:
            return []

        async with self._write_lock:
            try:
                async with self._session_factory() as session:
                    async with session.begin():
                        await self._ensure_generation(session, records)
                        rows = [self._to_row(record, keep_created_at=False) for record in records]
                        session.add_all(rows)
                        await session.flush()
                        ids = [row.id for row in rows]
            except IntegrityError as e:
                raise VectorStoreError(
                    "Chunk already indexed for this source",
                    operation="insert",
                    details={"source_id": records[0].source_id},
                ) from e
            except SQLAlchemyError as e:
                raise VectorStoreError(
                    f"Insert failed: {type(e).__name__}",
                    operation="insert",
                ) from e

        await self._index_added(ids, [record.embedding for record in records])
        logger.debug(f"{__name__}:insert_many - Inserted {len(ids)} records")
        return ids

    async def import_records(self, records: Iterable[ChunkRecord]) -> ImportReport:
        """
        Bulk import with deduplication on (source_id, chunk_index).

        The first record seen for a key wins, whether it already exists in
        the store or appears earlier in the batch. Creation times are kept.

        Args:
            records: Records from another store or an export

        Returns:
            ImportReport: Inserted and skipped counts

        Raises:
            EmbeddingMismatchError: Records do not match the index generation
            VectorStoreError: Storage failure
        """
        records = list(records)
        report = ImportReport()
        if not records:
            return report

        async with self._write_lock:
            try:
                async with self._session_factory() as session:
                    async with session.begin():
                        existing = await session.execute(select(ChunkModel.source_id, ChunkModel.chunk_index))
                        seen = {(source_id, chunk_index) for source_id, chunk_index in existing.all()}

                        fresh: list[ChunkRecord] = []
                        for record in records:
                            key = (record.source_id, record.chunk_index)
                            if key in seen:
                                report.skipped += 1
                                continue
                            seen.add(key)
                            fresh.append(record)

                        rows: list[ChunkModel] = []
                        if fresh:
                            await self._ensure_generation(session, fresh)
                            rows = [self._to_row(record, keep_created_at=True) for record in fresh]
                            session.add_all(rows)
                            await session.flush()
                        ids = [row.id for row in rows]
                        report.inserted = len(rows)
            except SQLAlchemyError as e:
                raise VectorStoreError(
                    f"Import failed: {type(e).__name__}",
                    operation="import",
                ) from e

        await self._index_added(ids, [record.embedding for record in fresh])
        logger.info(
            f"{__name__}:import_records - inserted={report.inserted}, skipped={report.skipped}"
        )
        return report

    async def clear(self) -> None:
        """Irreversibly remove every record, the NN index and the generation."""
        async with self._write_lock:
            try:
                async with self._session_factory() as session:
                    async with session.begin():
                        await session.execute(delete(ChunkModel))
                        await session.execute(delete(IndexGenerationModel))
            except SQLAlchemyError as e:
                raise VectorStoreError(f"Clear failed: {type(e).__name__}", operation="clear") from e
            async with self._index_lock:
                self._nn_index = None
                self._nn_loaded = False
                self._indexed_ids = set()
        logger.info(f"{__name__}:clear - Index cleared")

    # ------------------------------------------------------------------- reads

    async def scan(self, with_source_text: bool = True) -> list[ChunkRecord]:
        """
        Return every record ordered by id.

        Args:
            with_source_text: Load each chunk's full source text; the
                retrieval path skips it and gets source_text=None

        Returns:
            list[ChunkRecord]: All records

        Raises:
            VectorStoreError: Read failure
        """
        statement = select(ChunkModel).order_by(ChunkModel.id)
        if not with_source_text:
            statement = statement.options(defer(ChunkModel.source_text, raiseload=True))
        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                return [self._to_record(row, with_source_text) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise VectorStoreError(f"Scan failed: {type(e).__name__}", operation="scan") from e

    async def iter_batches(self, batch_size: int = 500) -> AsyncIterator[list[ChunkRecord]]:
        """Yield records ordered by id in batches (keyset pagination)."""
        last_id = 0
        while True:
            try:
                async with self._session_factory() as session:
                    result = await session.execute(
                        select(ChunkModel)
                        .where(ChunkModel.id > last_id)
                        .order_by(ChunkModel.id)
                        .limit(batch_size)
                    )
                    rows = result.scalars().all()
            except SQLAlchemyError as e:
                raise VectorStoreError(f"Scan failed: {type(e).__name__}", operation="scan") from e
            if not rows:
                return
            last_id = rows[-1].id
            yield [self._to_record(row) for row in rows]

    async def count(self) -> int:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(func.count()).select_from(ChunkModel))
                return int(result.scalar_one())
        except SQLAlchemyError as e:
            raise VectorStoreError(f"Count failed: {type(e).__name__}", operation="count") from e

    async def has_source(self, source_id: str) -> bool:
        """True when at least one chunk of source_id is indexed."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(ChunkModel.id).where(ChunkModel.source_id == source_id).limit(1)
                )
                return result.first() is not None
        except SQLAlchemyError as e:
            raise VectorStoreError(
                f"Source lookup failed: {type(e).__name__}",
                operation="has_source",
                details={"source_id": source_id},
            ) from e

    async def generation(self) -> tuple[str, int] | None:
        """(embedding_model, dimension) of the live generation, or None when empty."""
        try:
            async with self._session_factory() as session:
                row = await session.get(IndexGenerationModel, GENERATION_ROW_ID)
                if row is None:
                    return None
                return row.embedding_model, row.dimension
        except SQLAlchemyError as e:
            raise VectorStoreError(
                f"Generation lookup failed: {type(e).__name__}", operation="generation"
            ) from e

    async def nearest(self, query_vector: list[float], k: int) -> list[tuple[int, float]]:
        """
        Content-vector nearest neighbours.

        Args:
            query_vector: Query embedding
            k: Maximum neighbours

        Returns:
            list[tuple[int, float]]: (record id, cosine) most similar first

        Raises:
            VectorStoreError: Query dimension differs from the index
        """
        index = await self._ensure_nn_index()
        if index is None:
            return []
        if len(query_vector) != index.dimension:
            raise VectorStoreError(
                f"Query dimension {len(query_vector)} does not match index dimension {index.dimension}",
                operation="nearest",
            )
        return index.search(query_vector, k)

    # ---------------------------------------------------------------- internals

    async def _ensure_generation(self, session: AsyncSession, records: list[ChunkRecord]) -> None:
        model = records[0].embedding_model
        dimension = records[0].dimension
        for record in records:
            question_dims = {len(vector) for vector in record.question_embeddings}
            if record.embedding_model != model or record.dimension != dimension or question_dims - {dimension}:
                actual_dimension = record.dimension if record.dimension != dimension else max(question_dims)
                raise EmbeddingMismatchError(model, dimension, record.embedding_model, actual_dimension)

        generation = await session.get(IndexGenerationModel, GENERATION_ROW_ID)
        if generation is None:
            session.add(
                IndexGenerationModel(id=GENERATION_ROW_ID, embedding_model=model, dimension=dimension)
            )
            logger.info(
                f"{__name__}:_ensure_generation - New generation model={model}, dimension={dimension}"
            )
        elif generation.embedding_model != model or generation.dimension != dimension:
            raise EmbeddingMismatchError(generation.embedding_model, generation.dimension, model, dimension)

    async def _ensure_nn_index(self) -> NearestNeighborIndex | None:
        async with self._index_lock:
            if not self._nn_loaded:
                async with self._session_factory() as session:
                    result = await session.execute(
                        select(ChunkModel.id, ChunkModel.embedding).order_by(ChunkModel.id)
                    )
                    rows = result.all()
                if rows:
                    self._nn_index = NearestNeighborIndex(len(rows[0].embedding))
                    self._nn_index.add([row.id for row in rows], [row.embedding for row in rows])
                    self._indexed_ids = {row.id for row in rows}
                self._nn_loaded = True
                logger.info(f"{__name__}:_ensure_nn_index - Built index over {len(rows)} vectors")
            return self._nn_index

    async def _index_added(self, ids: list[int], vectors: list[list[float]]) -> None:
        async with self._index_lock:
            if not self._nn_loaded or not ids:
                return
            pending = [(i, v) for i, v in zip(ids, vectors) if i not in self._indexed_ids]
            if not pending:
                return
            if self._nn_index is None:
                self._nn_index = NearestNeighborIndex(len(pending[0][1]))
            self._nn_index.add([i for i, _ in pending], [v for _, v in pending])
            self._indexed_ids.update(i for i, _ in pending)

    @staticmethod
    def _to_row(record: ChunkRecord, keep_created_at: bool) -> ChunkModel:
        if record.source_text is None:
            raise VectorStoreError(
                "Cannot store a record without its source text",
                operation="insert",
                details={"source_id": record.source_id},
            )
        row = ChunkModel(
            source_id=record.source_id,
            source_text=record.source_text,
            chunk_text=record.chunk_text,
            chunk_index=record.chunk_index,
            chunk_size=record.chunk_size,
            embedding=list(record.embedding),
            questions=list(record.questions),
            question_embeddings=[list(vector) for vector in record.question_embeddings],
            chunk_metadata=record.metadata.model_dump(mode="json"),
            embedding_model=record.embedding_model,
        )
        if keep_created_at:
            row.created_at = record.created_at
        return row

    @staticmethod
    def _to_record(row: ChunkModel, with_source_text: bool = True) -> ChunkRecord:
        return ChunkRecord.model_validate({
            "id": row.id,
            "source_id": row.source_id,
            "source_text": row.source_text if with_source_text else None,
            "chunk_text": row.chunk_text,
            "chunk_index": row.chunk_index,
            "chunk_size": row.chunk_size,
            "embedding": row.embedding,
            "questions": row.questions or [],
            "question_embeddings": row.question_embeddings or [],
            "metadata": row.chunk_metadata,
            "embedding_model": row.embedding_model,
            "created_at": row.created_at,
        })
