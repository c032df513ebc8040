"""
Embedding adapter.

Turns ordered batches of normalized text into fixed-dimension vectors.
Wraps any langchain_core Embeddings backend behind one process-wide
initialization, a per-call timeout and bounded retries for transient
failures. Callers normalize text first (see vectorqa.core.text_normalizer);
the adapter embeds exactly what it is given.

Dependencies: langchain_core, tenacity, vectorqa.boundary.models.initializer
System role: Sole gateway to the embedding model
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from langchain_core.embeddings import Embeddings
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from vectorqa.boundary.models.initializer import OnceInitializer
from vectorqa.core.exceptions import ModelTimeoutError, ModelUnavailableError

logger = logging.getLogger(__name__)

EmbeddingsFactory = Callable[[], Awaitable[Embeddings]]

_PROBE_TEXT = "dimension probe"


class EmbeddingAdapter:
    """Batch embedding with one-time initialization and bounded calls."""

    def __init__(
        self,
        embeddings_factory: EmbeddingsFactory,
        model_version: str,
        timeout_seconds: float = 30.0,
        batch_size: int = 100,
        retry_attempts: int = 3,
        retry_wait_seconds: float = 0.5,
    ) -> None:
        """
        Initialize adapter. The backend itself is built on first use.

        Args:
            embeddings_factory: Coroutine function returning the Embeddings backend
            model_version: Identifier recorded with every stored vector
            timeout_seconds: Upper bound for one backend call
            batch_size: Texts per backend call
            retry_attempts: Attempts per batch for transient failures
            retry_wait_seconds: Initial backoff between attempts
        """
        self._model_version = model_version
        self._timeout_seconds = timeout_seconds
        self._batch_size = batch_size
        self._retry_attempts = retry_attempts
        self._retry_wait_seconds = retry_wait_seconds
        self._dimension: int | None = None
        self._initializer: OnceInitializer[Embeddings] = OnceInitializer(
            self._build_backend(embeddings_factory),
            name="embedding",
        )

    @classmethod
    def from_embeddings(cls, embeddings: Embeddings, model_version: str, **kwargs) -> "EmbeddingAdapter":
        """Wrap an already constructed backend."""

        async def factory() -> Embeddings:
            return embeddings

        return cls(factory, model_version=model_version, **kwargs)

    @property
    def model_version(self) -> str:
        return self._model_version

    @property
    def dimension(self) -> int | None:
        """Vector dimension, known once the backend is initialized."""
        return self._dimension

    @property
    def is_initialized(self) -> bool:
        return self._initializer.is_initialized

    def _build_backend(self, factory: EmbeddingsFactory) -> Callable[[], Awaitable[Embeddings]]:
        async def build() -> Embeddings:
            backend = await factory()
            probe = await self._call_backend(backend, [_PROBE_TEXT])
            if len(probe) != 1 or not probe[0]:
                raise ModelUnavailableError(
                    "Embedding backend returned no vector for the probe",
                    backend="embedding",
                )
            self._dimension = len(probe[0])
            logger.info(
                f"{__name__}:initialize - model={self._model_version}, dimension={self._dimension}"
            )
            return backend

        return build

    async def initialize(self) -> None:
        """Initialize the backend; safe to call concurrently and repeatedly."""
        await self._initializer.get()

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """
        Embed an ordered batch of normalized texts.

        Args:
            texts: Normalized strings

        Returns:
            list[list[float]]: One vector per input, same order

        Raises:
            ModelUnavailableError: Backend unreachable or malformed output
            ModelTimeoutError: A backend call exceeded its timeout
        """
        if not texts:
            return []

        backend = await self._initializer.get()
        vectors: list[list[float]] = []
        for start in range(0, len(texts), self._batch_size):
            batch = texts[start:start + self._batch_size]
            vectors.extend(await self._embed_batch_with_retry(backend, batch))
        return vectors

    async def embed_one(self, text: str) -> list[float]:
        """Embed a single normalized text."""
        return (await self.embed([text]))[0]

    async def _embed_batch_with_retry(self, backend: Embeddings, batch: list[str]) -> list[list[float]]:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(ModelUnavailableError),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential_jitter(initial=self._retry_wait_seconds, max=10, jitter=1),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:embed - Retry {retry_state.attempt_number}/{self._retry_attempts} "
                f"after {type(retry_state.outcome.exception()).__name__}"
            ),
            reraise=True,
        ):
            with attempt:
                vectors = await self._call_backend(backend, batch)
                self._check_shape(batch, vectors)
        return vectors

    async def _call_backend(self, backend: Embeddings, batch: list[str]) -> list[list[float]]:
        try:
            vectors = await asyncio.wait_for(
                backend.aembed_documents(batch),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ModelTimeoutError("embedding", self._timeout_seconds) from e
        except ModelUnavailableError:
            raise
        except Exception as e:
            raise ModelUnavailableError(
                f"Embedding backend failed: {type(e).__name__}",
                backend="embedding",
                details={"batch_size": len(batch)},
            ) from e
        return [list(map(float, vector)) for vector in vectors]

    def _check_shape(self, batch: list[str], vectors: list[list[float]]) -> None:
        if len(vectors) != len(batch):
            raise ModelUnavailableError(
                f"Embedding backend returned {len(vectors)} vectors for {len(batch)} texts",
                backend="embedding",
            )
        for vector in vectors:
            if len(vector) != self._dimension:
                raise ModelUnavailableError(
                    f"Embedding backend returned dimension {len(vector)}, expected {self._dimension}",
                    backend="embedding",
                )


def build_default_embedding_adapter(settings=None) -> EmbeddingAdapter:
    """
    Build the adapter backed by Google Gemini embeddings from settings.

    Args:
        settings: Application settings (uses get_settings() if None)

    Returns:
        EmbeddingAdapter: Uninitialized adapter
    """
    from vectorqa.boundary.models.embeddings_wrapper import FixedDimensionEmbeddings
    from vectorqa.configs import get_settings

    model_settings = (settings or get_settings()).models

    async def factory() -> Embeddings:
        return FixedDimensionEmbeddings(
            model=model_settings.embedding_model,
            output_dimensionality=model_settings.embedding_dimension,
        )

    return EmbeddingAdapter(
        factory,
        model_version=f"{model_settings.embedding_model}@{model_settings.embedding_dimension}",
        timeout_seconds=model_settings.embedding_timeout_seconds,
        batch_size=model_settings.embedding_batch_size,
        retry_attempts=model_settings.embedding_retry_attempts,
    )
