"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory vector index store, deterministic fake embeddings,
scripted chat models, record builders
Dependencies: pytest, pytest-asyncio, sqlalchemy, langchain_core
System role: Test infrastructure and fixture management
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding, Embeddings
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, AIMessageChunk
from langchain_core.outputs import ChatGeneration, ChatGenerationChunk, ChatResult
from pydantic import Field

from vectorqa.boundary.models.embedding_adapter import EmbeddingAdapter
from vectorqa.boundary.vdb.vector_index_store import VectorIndexStore
from vectorqa.models.chunk import ChunkRecord
from vectorqa.models.metadata import TextSourceMetadata

EMBEDDING_SIZE = 32
FAKE_MODEL_VERSION = "fake-embedding@32"


class ScriptedChatModel(BaseChatModel):
    """
    Chat model that replays a fixed script.

    ainvoke returns ``response`` (or the joined tokens); astream yields
    ``tokens`` one by one, raising after ``fail_after`` tokens when set and
    sleeping ``token_delay`` seconds before each token.
    """

    response: str = ""
    tokens: list[str] = Field(default_factory=list)
    fail_after: int | None = None
    token_delay: float = 0.0
    error: bool = False
    calls: int = 0
    streamed: int = 0
    stream_closed: bool = False

    @property
    def _llm_type(self) -> str:
        return "scripted"

    def _generate(self, messages, stop=None, run_manager=None, **kwargs: Any) -> ChatResult:
        self.calls += 1
        if self.error:
            raise RuntimeError("backend down")
        text = self.response or "".join(self.tokens)
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content=text))])

    async def _astream(self, messages, stop=None, run_manager=None, **kwargs: Any):
        self.calls += 1
        try:
            for i, token in enumerate(self.tokens):
                if self.fail_after is not None and i >= self.fail_after:
                    raise RuntimeError("stream broke")
                if self.token_delay:
                    await asyncio.sleep(self.token_delay)
                self.streamed += 1
                yield ChatGenerationChunk(message=AIMessageChunk(content=token))
            if self.fail_after is not None and self.fail_after >= len(self.tokens):
                raise RuntimeError("stream broke")
        finally:
            self.stream_closed = True


class LookupEmbeddings(Embeddings):
    """Embeddings returning fixed vectors for known texts and zeros otherwise."""

    def __init__(self, vectors: dict[str, list[float]], dimension: int) -> None:
        self.vectors = vectors
        self.dimension = dimension
        self.calls: list[list[str]] = []

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [self.vectors.get(text, [0.0] * self.dimension) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        return self.embed_documents([text])[0]


@pytest.fixture
async def store():
    """
    Create an in-memory vector index store.

    Yields:
        VectorIndexStore: Store with tables created, disposed after the test
    """
    index_store = VectorIndexStore.from_url("sqlite+aiosqlite:///:memory:", echo=False)
    await index_store.create_tables()
    yield index_store
    await index_store.dispose()


@pytest.fixture
def fake_embeddings() -> DeterministicFakeEmbedding:
    """Hash-seeded embeddings: identical text, identical vector."""
    return DeterministicFakeEmbedding(size=EMBEDDING_SIZE)


@pytest.fixture
def embedding_adapter(fake_embeddings: DeterministicFakeEmbedding) -> EmbeddingAdapter:
    """Embedding adapter over deterministic fake embeddings, no retries."""
    return EmbeddingAdapter.from_embeddings(
        fake_embeddings,
        model_version=FAKE_MODEL_VERSION,
        retry_attempts=1,
        timeout_seconds=5.0,
    )


@pytest.fixture
def make_record():
    """
    Build ChunkRecords with sensible defaults.

    Returns:
        Callable: make_record(source_id, chunk_index, embedding, **overrides)
    """
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _make(
        source_id: str = "doc.txt",
        chunk_index: int = 0,
        embedding: list[float] | None = None,
        questions: list[str] | None = None,
        question_embeddings: list[list[float]] | None = None,
        chunk_text: str | None = None,
        embedding_model: str = FAKE_MODEL_VERSION,
        created_offset: int = 0,
        **overrides: Any,
    ) -> ChunkRecord:
        text = chunk_text or f"Chunk {chunk_index} of {source_id}."
        return ChunkRecord(
            source_id=source_id,
            source_text=overrides.pop("source_text", text),
            chunk_text=text,
            chunk_index=chunk_index,
            chunk_size=len(text),
            embedding=embedding if embedding is not None else [1.0] + [0.0] * (EMBEDDING_SIZE - 1),
            questions=questions or [],
            question_embeddings=question_embeddings or [],
            metadata=TextSourceMetadata(chunk_index=chunk_index, embedding_model=embedding_model),
            embedding_model=embedding_model,
            created_at=base_time + timedelta(seconds=created_offset),
            **overrides,
        )

    return _make


def unit(index: int, dimension: int = EMBEDDING_SIZE) -> list[float]:
    """Basis vector e_index."""
    vector = [0.0] * dimension
    vector[index] = 1.0
    return vector


def mix(cosine: float, dimension: int = EMBEDDING_SIZE) -> list[float]:
    """Unit vector whose cosine with e_0 is ``cosine``."""
    vector = [0.0] * dimension
    vector[0] = cosine
    vector[1] = (1.0 - cosine ** 2) ** 0.5
    return vector


@pytest.fixture
def scripted_chat_model() -> type[ScriptedChatModel]:
    """Provide the ScriptedChatModel class for per-test scripts."""
    return ScriptedChatModel


@pytest.fixture
def lookup_embeddings() -> type[LookupEmbeddings]:
    """Provide the LookupEmbeddings class for hand-placed vectors."""
    return LookupEmbeddings


@pytest.fixture
def basis():
    """Provide unit(index) and mix(cosine) vector builders."""
    return unit, mix
