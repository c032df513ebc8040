"""
Test suite for the health endpoint.

System role: Verification of liveness reporting
"""

from vectorqa.core.exceptions import VectorStoreError


class TestHealthEndpoint:
    def test_health_should_report_indexed_chunk_count(self, client, mock_store):
        # Arrange
        mock_store.count.return_value = 42

        # Act
        response = client.get("/api/v1/health")

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["documents"] == 42
        assert "timestamp" in body

    def test_health_store_failure_should_return_503(self, client, mock_store):
        # Arrange
        mock_store.count.side_effect = VectorStoreError("database is locked")

        # Act
        response = client.get("/api/v1/health")

        # Assert
        assert response.status_code == 503
        assert response.json()["success"] is False

    def test_response_should_carry_correlation_id(self, client):
        # Act
        response = client.get("/api/v1/health", headers={"X-Correlation-ID": "req-123"})

        # Assert
        assert response.headers["X-Correlation-ID"] == "req-123"

    def test_missing_correlation_id_should_be_generated(self, client):
        # Act
        response = client.get("/api/v1/health")

        # Assert
        assert len(response.headers["X-Correlation-ID"]) == 36
