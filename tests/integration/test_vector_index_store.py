"""
Integration tests for VectorIndexStore.

Runs against an in-memory SQLite database through the real SQLAlchemy
async engine. Covers inserts, generation enforcement, deduplicating
imports, scans, clearing and FAISS nearest-neighbour lookups.

System role: Verification of vector index persistence
"""

import asyncio
from datetime import datetime, timezone

import pytest

from vectorqa.boundary.vdb.nearest_neighbor_index import NearestNeighborIndex
from vectorqa.boundary.vdb.vector_index_store import VectorIndexStore
from vectorqa.core.exceptions import EmbeddingMismatchError, VectorStoreError


class TestVectorIndexStoreInsert:
    """Test appends and generation enforcement."""

    @pytest.mark.asyncio
    async def test_insert_should_assign_monotonic_ids(self, store, make_record):
        # Act
        first = await store.insert(make_record(chunk_index=0))
        second = await store.insert(make_record(chunk_index=1))

        # Assert
        assert second > first
        assert await store.count() == 2

    @pytest.mark.asyncio
    async def test_insert_should_round_trip_record(self, store, make_record, basis):
        # Arrange
        unit, _ = basis
        record = make_record(questions=["What is chunk zero?"], question_embeddings=[unit(2)])

        # Act
        record_id = await store.insert(record)
        stored = (await store.scan())[0]

        # Assert
        assert stored.id == record_id
        assert stored.chunk_text == record.chunk_text
        assert stored.embedding == record.embedding
        assert stored.questions == ["What is chunk zero?"]
        assert stored.question_embeddings == [unit(2)]
        assert stored.metadata.source_type == "text"

    @pytest.mark.asyncio
    async def test_insert_duplicate_key_should_raise(self, store, make_record):
        # Arrange
        await store.insert(make_record(chunk_index=0))

        # Act & Assert
        with pytest.raises(VectorStoreError):
            await store.insert(make_record(chunk_index=0))
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_insert_without_source_text_should_raise(self, store, make_record):
        # Arrange
        record = make_record(source_text=None)

        # Act & Assert
        with pytest.raises(VectorStoreError) as exc_info:
            await store.insert(record)
        assert exc_info.value.details["source_id"] == "doc.txt"
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_insert_many_should_be_atomic(self, store, make_record):
        # Arrange
        await store.insert(make_record(source_id="a", chunk_index=1))
        batch = [make_record(source_id="a", chunk_index=0), make_record(source_id="a", chunk_index=1)]

        # Act & Assert
        with pytest.raises(VectorStoreError):
            await store.insert_many(batch)
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_insert_other_model_should_raise_mismatch(self, store, make_record):
        # Arrange
        await store.insert(make_record(chunk_index=0))

        # Act & Assert
        with pytest.raises(EmbeddingMismatchError):
            await store.insert(make_record(chunk_index=1, embedding_model="other@32"))

    @pytest.mark.asyncio
    async def test_insert_other_dimension_should_raise_mismatch(self, store, make_record):
        # Arrange
        await store.insert(make_record(chunk_index=0))

        # Act & Assert
        with pytest.raises(EmbeddingMismatchError) as exc_info:
            await store.insert(make_record(chunk_index=1, embedding=[1.0, 0.0]))
        assert exc_info.value.details["actual_dimension"] == 2

    @pytest.mark.asyncio
    async def test_insert_misaligned_question_dimension_should_raise(self, store, make_record):
        # Act & Assert
        with pytest.raises(EmbeddingMismatchError):
            await store.insert(make_record(questions=["Q?"], question_embeddings=[[1.0, 0.0]]))

    @pytest.mark.asyncio
    async def test_generation_should_follow_first_insert_and_reset_on_clear(self, store, make_record):
        # Arrange
        assert await store.generation() is None
        await store.insert(make_record())

        # Act
        generation = await store.generation()
        await store.clear()

        # Assert
        assert generation == ("fake-embedding@32", 32)
        assert await store.generation() is None
        await store.insert(make_record(embedding=[1.0, 0.0], embedding_model="new@2"))
        assert await store.generation() == ("new@2", 2)

    @pytest.mark.asyncio
    async def test_concurrent_inserts_should_all_persist(self, store, make_record):
        # Act
        await asyncio.gather(*(store.insert(make_record(chunk_index=i)) for i in range(20)))

        # Assert
        records = await store.scan()
        assert len(records) == 20
        assert len({r.id for r in records}) == 20


class TestVectorIndexStoreImport:
    """Test deduplicating bulk import."""

    @pytest.mark.asyncio
    async def test_import_should_skip_existing_and_in_batch_duplicates(self, store, make_record):
        # Arrange
        await store.insert(make_record(source_id="a", chunk_index=0, chunk_text="original"))
        batch = [
            make_record(source_id="a", chunk_index=0, chunk_text="replacement"),
            make_record(source_id="b", chunk_index=0, chunk_text="first b"),
            make_record(source_id="b", chunk_index=0, chunk_text="second b"),
            make_record(source_id="b", chunk_index=1),
        ]

        # Act
        report = await store.import_records(batch)

        # Assert
        texts = {(r.source_id, r.chunk_index): r.chunk_text for r in await store.scan()}
        assert (report.inserted, report.skipped) == (2, 2)
        assert texts[("a", 0)] == "original"
        assert texts[("b", 0)] == "first b"

    @pytest.mark.asyncio
    async def test_import_should_preserve_created_at(self, store, make_record):
        # Arrange
        record = make_record(created_offset=3600)

        # Act
        await store.import_records([record])

        # Assert
        stored = (await store.scan())[0]
        created = stored.created_at.replace(tzinfo=stored.created_at.tzinfo or timezone.utc)
        assert created == datetime(2024, 1, 1, 1, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_import_empty_should_do_nothing(self, store):
        # Act
        report = await store.import_records([])

        # Assert
        assert (report.inserted, report.skipped) == (0, 0)


class TestVectorIndexStoreRead:
    """Test scans and lookups."""

    @pytest.mark.asyncio
    async def test_iter_batches_should_page_in_id_order(self, store, make_record):
        # Arrange
        await store.insert_many([make_record(chunk_index=i) for i in range(7)])

        # Act
        batches = [batch async for batch in store.iter_batches(batch_size=3)]

        # Assert
        assert [len(b) for b in batches] == [3, 3, 1]
        ids = [r.id for b in batches for r in b]
        assert ids == sorted(ids)

    @pytest.mark.asyncio
    async def test_has_source_should_report_indexed_sources(self, store, make_record):
        # Arrange
        await store.insert(make_record(source_id="present.txt"))

        # Assert
        assert await store.has_source("present.txt") is True
        assert await store.has_source("absent.txt") is False

    @pytest.mark.asyncio
    async def test_clear_should_remove_everything(self, store, make_record):
        # Arrange
        await store.insert_many([make_record(chunk_index=i) for i in range(3)])

        # Act
        await store.clear()

        # Assert
        assert await store.count() == 0
        assert await store.scan() == []
        assert await store.nearest([1.0] * 32, k=3) == []

    @pytest.mark.asyncio
    async def test_scan_without_source_text_should_leave_it_unloaded(self, store, make_record):
        # Arrange
        await store.insert(make_record(chunk_text="Refunds take five days."))

        # Act
        records = await store.scan(with_source_text=False)

        # Assert
        assert len(records) == 1
        assert records[0].source_text is None
        assert records[0].chunk_text == "Refunds take five days."

    @pytest.mark.asyncio
    async def test_ids_should_not_be_reused_after_clear(self, store, make_record):
        # Arrange
        await store.insert_many([make_record(chunk_index=i) for i in range(2)])
        old_max = max(r.id for r in await store.scan())
        await store.clear()

        # Act
        new_id = await store.insert(make_record(chunk_index=0))

        # Assert
        assert new_id > old_max


class TestVectorIndexStoreNearest:
    """Test the FAISS content-vector index."""

    @pytest.mark.asyncio
    async def test_nearest_should_rank_by_cosine(self, store, make_record, basis):
        # Arrange
        unit, mix = basis
        ids = await store.insert_many([
            make_record(chunk_index=0, embedding=mix(0.2)),
            make_record(chunk_index=1, embedding=mix(0.9)),
            make_record(chunk_index=2, embedding=unit(5)),
        ])

        # Act
        neighbours = await store.nearest(unit(0), k=2)

        # Assert
        assert [row_id for row_id, _ in neighbours] == [ids[1], ids[0]]
        assert neighbours[0][1] == pytest.approx(0.9, abs=1e-5)

    @pytest.mark.asyncio
    async def test_nearest_should_include_records_added_after_build(self, store, make_record, basis):
        # Arrange
        unit, _ = basis
        await store.insert(make_record(chunk_index=0, embedding=unit(1)))
        await store.nearest(unit(0), k=1)

        # Act
        new_id = await store.insert(make_record(chunk_index=1, embedding=unit(0)))
        neighbours = await store.nearest(unit(0), k=5)

        # Assert
        assert neighbours[0][0] == new_id
        assert len(neighbours) == 2

    @pytest.mark.asyncio
    async def test_nearest_wrong_dimension_should_raise(self, store, make_record):
        # Arrange
        await store.insert(make_record())

        # Act & Assert
        with pytest.raises(VectorStoreError):
            await store.nearest([1.0, 0.0], k=1)

    @pytest.mark.asyncio
    async def test_store_on_file_database_should_persist_across_instances(self, tmp_path, make_record):
        # Arrange
        url = f"sqlite+aiosqlite:///{tmp_path / 'index.db'}"
        writer = VectorIndexStore.from_url(url, echo=False)
        await writer.create_tables()
        await writer.insert(make_record())
        await writer.dispose()

        # Act
        reader = VectorIndexStore.from_url(url, echo=False)
        try:
            count = await reader.count()
            generation = await reader.generation()
        finally:
            await reader.dispose()

        # Assert
        assert count == 1
        assert generation == ("fake-embedding@32", 32)


class TestVectorIndexStoreReadErrors:
    """Test that read failures surface as VectorStoreError."""

    @pytest.fixture
    async def bare_store(self):
        """Store on a fresh in-memory database whose tables were never created."""
        index_store = VectorIndexStore.from_url("sqlite+aiosqlite:///:memory:", echo=False)
        yield index_store
        await index_store.dispose()

    @pytest.mark.asyncio
    async def test_count_should_raise_store_error(self, bare_store):
        # Act & Assert
        with pytest.raises(VectorStoreError) as exc_info:
            await bare_store.count()
        assert exc_info.value.details["operation"] == "count"

    @pytest.mark.asyncio
    async def test_has_source_should_raise_store_error(self, bare_store):
        # Act & Assert
        with pytest.raises(VectorStoreError) as exc_info:
            await bare_store.has_source("doc.txt")
        assert exc_info.value.details["operation"] == "has_source"
        assert exc_info.value.details["source_id"] == "doc.txt"

    @pytest.mark.asyncio
    async def test_generation_should_raise_store_error(self, bare_store):
        # Act & Assert
        with pytest.raises(VectorStoreError) as exc_info:
            await bare_store.generation()
        assert exc_info.value.details["operation"] == "generation"


class TestNearestNeighborIndex:
    def test_search_should_return_ids_with_cosine(self):
        # Arrange
        index = NearestNeighborIndex(3)
        index.add([10, 20], [[2.0, 0.0, 0.0], [0.0, 1.0, 0.0]])

        # Act
        results = index.search([1.0, 0.0, 0.0], k=5)

        # Assert
        assert results[0][0] == 10
        assert results[0][1] == pytest.approx(1.0, abs=1e-6)
        assert len(results) == 2

    def test_add_wrong_dimension_should_raise(self):
        with pytest.raises(ValueError):
            NearestNeighborIndex(3).add([1], [[1.0, 0.0]])

    def test_empty_index_should_return_nothing(self):
        assert NearestNeighborIndex(3).search([1.0, 0.0, 0.0], k=3) == []
