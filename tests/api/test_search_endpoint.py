"""
Test suite for the search endpoint.

Tests success payloads and error-to-status mapping with a mocked
QueryService.

System role: Verification of similarity search HTTP API
"""

import pytest

from vectorqa.core.exceptions import (
    EmbeddingMismatchError,
    ModelUnavailableError,
    ValidationError,
    VectorStoreError,
)
from vectorqa.models.search import SearchResponse, SearchResult


class TestSearchEndpoint:
    def test_search_should_return_ranked_results(self, client, mock_query_service):
        # Arrange
        mock_query_service.search.return_value = SearchResponse(
            results=[
                SearchResult(
                    id=3,
                    chunk_text="The sky is blue.",
                    source_id="sky.txt",
                    score=0.87,
                    chunk_index=0,
                    matched_question="Why is the sky blue?",
                )
            ],
            query="sky",
            took_ms=4.2,
        )

        # Act
        response = client.post("/api/v1/search", json={"query": "sky", "top_k": 3})

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["results"][0]["source_id"] == "sky.txt"
        assert body["results"][0]["matched_question"] == "Why is the sky blue?"
        request = mock_query_service.search.await_args.args[0]
        assert request.top_k == 3

    def test_search_empty_results_should_be_success(self, client, mock_query_service):
        # Arrange
        mock_query_service.search.return_value = SearchResponse(results=[], query="nothing", took_ms=1.0)

        # Act
        response = client.post("/api/v1/search", json={"query": "nothing"})

        # Assert
        assert response.status_code == 200
        assert response.json()["results"] == []

    @pytest.mark.parametrize(
        "error,status,code",
        [
            (ValidationError("Query must not be empty", field="query"), 400, "VALIDATION_ERROR"),
            (ModelUnavailableError("quota", backend="embedding"), 503, "MODEL_UNAVAILABLE"),
            (
                EmbeddingMismatchError("old-model@32", 32, "new-model@32", 32, operation="search"),
                503,
                "INDEX_MISMATCH",
            ),
            (VectorStoreError("disk I/O error"), 500, "PROCESSING_ERROR"),
        ],
    )
    def test_search_errors_should_map_to_status(self, client, mock_query_service, error, status, code):
        # Arrange
        mock_query_service.search.side_effect = error

        # Act
        response = client.post("/api/v1/search", json={"query": "   "})

        # Assert
        assert response.status_code == status
        body = response.json()
        assert body["success"] is False
        assert body["details"]["code"] == code

    def test_internal_error_should_not_leak_details(self, client, mock_query_service):
        # Arrange
        mock_query_service.search.side_effect = RuntimeError("secret connection string")

        # Act
        response = client.post("/api/v1/search", json={"query": "q"})

        # Assert
        assert response.status_code == 500
        assert "secret" not in response.text

    @pytest.mark.parametrize("payload", [{}, {"query": ""}, {"query": "q", "top_k": 0}, {"query": "q", "similarity_threshold": 2}])
    def test_malformed_request_should_be_rejected(self, client, payload):
        # Act
        response = client.post("/api/v1/search", json=payload)

        # Assert
        assert response.status_code == 422
