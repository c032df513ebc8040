"""
Test suite for the ingest endpoint.

System role: Verification of batch ingestion HTTP API
"""

from vectorqa.core.exceptions import VectorStoreError
from vectorqa.models.ingestion import IngestionSummary, IngestMode, IngestResult


class TestIngestEndpoint:
    def test_ingest_should_return_summary(self, client, mock_ingestion_service):
        # Arrange
        summary = IngestionSummary()
        summary.add(IngestResult(source_id="a.txt", success=True, chunks_created=2))
        summary.add(IngestResult(source_id="b.txt", success=False, error="No content"))
        mock_ingestion_service.ingest_batch.return_value = summary

        # Act
        response = client.post(
            "/api/v1/ingest",
            json={
                "sources": [
                    {"source_id": "a.txt", "text": "Some text."},
                    {"source_id": "b.txt", "text": " "},
                ],
                "mode": "resume",
            },
        )

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert (body["successful"], body["failed"], body["total_chunks"]) == (1, 1, 2)
        sources, = mock_ingestion_service.ingest_batch.await_args.args
        assert [s.source_id for s in sources] == ["a.txt", "b.txt"]
        assert mock_ingestion_service.ingest_batch.await_args.kwargs["mode"] == IngestMode.RESUME

    def test_ingest_default_mode_should_append(self, client, mock_ingestion_service):
        # Arrange
        mock_ingestion_service.ingest_batch.return_value = IngestionSummary()

        # Act
        client.post("/api/v1/ingest", json={"sources": [{"source_id": "a.txt", "text": "x"}]})

        # Assert
        assert mock_ingestion_service.ingest_batch.await_args.kwargs["mode"] == IngestMode.APPEND

    def test_ingest_without_sources_should_be_rejected(self, client):
        # Act
        response = client.post("/api/v1/ingest", json={"sources": []})

        # Assert
        assert response.status_code == 422

    def test_ingest_store_failure_should_return_500(self, client, mock_ingestion_service):
        # Arrange
        mock_ingestion_service.ingest_batch.side_effect = VectorStoreError("Clear failed", operation="clear")

        # Act
        response = client.post(
            "/api/v1/ingest",
            json={"sources": [{"source_id": "a.txt", "text": "x"}], "mode": "clear"},
        )

        # Assert
        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
