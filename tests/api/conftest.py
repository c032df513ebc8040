"""
API test fixtures.

Provides a TestClient over the assembled app with dependency overrides.
The lifespan is not entered, so no database file is created.

Dependencies: fastapi.testclient
System role: HTTP test infrastructure
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from vectorqa.api.deps import get_ingestion_service, get_query_service, get_vector_index_store
from vectorqa.api.main import create_app
from vectorqa.application.services.ingestion_service import IngestionService
from vectorqa.application.services.query_service import QueryService
from vectorqa.boundary.vdb.vector_index_store import VectorIndexStore


@pytest.fixture
def mock_query_service() -> MagicMock:
    """Provide mock query service."""
    service = MagicMock(spec=QueryService)
    service.search = AsyncMock()
    service.ask = AsyncMock()
    service.ask_stream = AsyncMock()
    return service


@pytest.fixture
def mock_ingestion_service() -> MagicMock:
    """Provide mock ingestion service."""
    service = MagicMock(spec=IngestionService)
    service.ingest_batch = AsyncMock()
    return service


@pytest.fixture
def mock_store() -> MagicMock:
    """Provide mock vector index store."""
    store = MagicMock(spec=VectorIndexStore)
    store.count = AsyncMock(return_value=0)
    return store


@pytest.fixture
def client(mock_query_service, mock_ingestion_service, mock_store):
    """Provide TestClient with all services overridden."""
    app = create_app()
    app.dependency_overrides[get_query_service] = lambda: mock_query_service
    app.dependency_overrides[get_ingestion_service] = lambda: mock_ingestion_service
    app.dependency_overrides[get_vector_index_store] = lambda: mock_store
    yield TestClient(app)
    app.dependency_overrides.clear()
