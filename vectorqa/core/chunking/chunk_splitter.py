"""
Chunk splitter for source text.

Splits extracted source text into ordered, contiguous chunks that jointly
cover the source. Two modes:
- fixed-size: LangChain's RecursiveCharacterTextSplitter without overlap,
  breaking on paragraphs first, then lines, sentences and words, and
  cutting mid-word only when a piece has no break at all
- semantic: group consecutive sentences while adjacent-sentence embedding
  similarity stays above a drift threshold, never exceeding the size cap

Sources no longer than the cap are returned as one chunk. Empty or
whitespace-only sources produce no chunks.

Dependencies: langchain_text_splitters, numpy, vectorqa.core.text_normalizer
System role: First stage of the ingestion pipeline
"""

import logging
import re
from collections.abc import Awaitable, Callable

import numpy as np
from langchain_text_splitters import RecursiveCharacterTextSplitter

from vectorqa.core.text_normalizer import normalize_batch
from vectorqa.models.chunk import TextChunk
from vectorqa.models.metadata import ChunkingStrategy

logger = logging.getLogger(__name__)

SentenceEmbedder = Callable[[list[str]], Awaitable[list[list[float]]]]

# Coarsest break first; "" is the hard cut.
FIXED_SIZE_SEPARATORS = ["\n\n", "\n", ". ", " ", ""]

_SENTENCE_END_RE = re.compile(r"[.!?]+[\"')\]]*(?=\s)|\n\s*\n")


def _trimmed_span(text: str, start: int, end: int) -> tuple[int, int] | None:
    """Shrink [start, end) to exclude surrounding whitespace; None if nothing is left."""
    segment = text[start:end]
    stripped = segment.strip()
    if not stripped:
        return None
    lead = len(segment) - len(segment.lstrip())
    return start + lead, start + lead + len(stripped)


def _cosine(a: np.ndarray, b: np.ndarray) -> float:
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom == 0.0:
        return 0.0
    return float(np.dot(a, b) / denom)


class ChunkSplitter:
    """Split source text into ordered chunks for indexing."""

    def __init__(
        self,
        chunk_size: int = 1000,
        max_chunks: int = 500,
        semantic_drift_threshold: float = 0.5,
        sentence_embedder: SentenceEmbedder | None = None,
    ) -> None:
        """
        Initialize splitter.

        Args:
            chunk_size: Maximum characters per chunk
            max_chunks: Chunks kept per source; the rest are dropped with a warning
            semantic_drift_threshold: Adjacent-sentence cosine below which a new chunk starts
            sentence_embedder: Async batch embedder used by semantic mode

        Raises:
            ValueError: When chunk_size or max_chunks is not positive
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if max_chunks <= 0:
            raise ValueError("max_chunks must be positive")
        self.chunk_size = chunk_size
        self.max_chunks = max_chunks
        self.semantic_drift_threshold = semantic_drift_threshold
        self._sentence_embedder = sentence_embedder
        # Separators stay on the end of the piece they close, so a sentence
        # keeps its full stop and start_index points at the chunk's first character.
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=0,
            separators=FIXED_SIZE_SEPARATORS,
            keep_separator="end",
            add_start_index=True,
            strip_whitespace=True,
            length_function=len,
        )

    async def split(
        self,
        text: str,
        semantic: bool = False,
    ) -> tuple[list[TextChunk], ChunkingStrategy]:
        """
        Split text into chunks.

        Args:
            text: Extracted source text
            semantic: Use semantic grouping when a sentence embedder is available

        Returns:
            tuple: (chunks, strategy actually used)
        """
        span = _trimmed_span(text, 0, len(text))
        if span is None:
            return [], ChunkingStrategy.WHOLE

        if len(text) <= self.chunk_size:
            start, end = span
            return [TextChunk(chunk_index=0, char_start=start, char_end=end, text=text[start:end])], ChunkingStrategy.WHOLE

        if semantic and self._sentence_embedder is not None:
            try:
                chunks = await self.split_semantic(text)
                return self._cap(chunks), ChunkingStrategy.SEMANTIC
            except Exception as e:
                logger.warning(
                    f"{__name__}:split - Semantic chunking failed, falling back to fixed-size: "
                    f"{type(e).__name__}: {e}"
                )

        return self._cap(self.split_fixed(text)), ChunkingStrategy.FIXED_SIZE

    def split_fixed(self, text: str, offset: int = 0, end_at: int | None = None) -> list[TextChunk]:
        """
        Deterministic fixed-size split of text[offset:end_at].

        Args:
            text: Full source text
            offset: Position to start splitting from
            end_at: Position to stop at (defaults to end of text)

        Returns:
            list[TextChunk]: Chunks indexed from 0 with offsets into text
        """
        limit = len(text) if end_at is None else end_at
        spans: list[tuple[int, int]] = []
        for document in self._splitter.create_documents([text[offset:limit]]):
            start = offset + document.metadata["start_index"]
            spans.append((start, start + len(document.page_content)))
        return self._to_chunks(text, spans)

    async def split_semantic(self, text: str) -> list[TextChunk]:
        """
        Group contiguous sentences by embedding continuity.

        Sentences longer than the size cap are split fixed-size in place.

        Args:
            text: Full source text

        Returns:
            list[TextChunk]: Chunks indexed from 0

        Raises:
            RuntimeError: When no sentence embedder is configured
            ValueError: When the embedder returns the wrong number of vectors
        """
        if self._sentence_embedder is None:
            raise RuntimeError("Semantic chunking requires a sentence embedder")

        sentences = self._sentence_spans(text)
        if not sentences:
            return []

        vectors = await self._sentence_embedder(normalize_batch([text[s:e] for s, e in sentences]))
        if len(vectors) != len(sentences):
            raise ValueError(f"Expected {len(sentences)} sentence vectors, got {len(vectors)}")
        matrix = np.asarray(vectors, dtype=np.float32)

        spans: list[tuple[int, int]] = []
        group: tuple[int, int] | None = None
        for i, (start, end) in enumerate(sentences):
            if end - start > self.chunk_size:
                if group is not None:
                    spans.append(group)
                    group = None
                spans.extend((c.char_start, c.char_end) for c in self.split_fixed(text, start, end))
                continue
            if group is None:
                group = (start, end)
                continue
            drifted = _cosine(matrix[i - 1], matrix[i]) < self.semantic_drift_threshold
            if drifted or end - group[0] > self.chunk_size:
                spans.append(group)
                group = (start, end)
            else:
                group = (group[0], end)
        if group is not None:
            spans.append(group)

        logger.info(
            f"{__name__}:split_semantic - {len(sentences)} sentences grouped into {len(spans)} chunks"
        )
        return self._to_chunks(text, spans)

    @staticmethod
    def _sentence_spans(text: str) -> list[tuple[int, int]]:
        spans: list[tuple[int, int]] = []
        start = 0
        for match in _SENTENCE_END_RE.finditer(text):
            trimmed = _trimmed_span(text, start, match.end())
            if trimmed is not None:
                spans.append(trimmed)
            start = match.end()
        trimmed = _trimmed_span(text, start, len(text))
        if trimmed is not None:
            spans.append(trimmed)
        return spans

    @staticmethod
    def _to_chunks(text: str, spans: list[tuple[int, int]]) -> list[TextChunk]:
        return [
            TextChunk(chunk_index=i, char_start=start, char_end=end, text=text[start:end])
            for i, (start, end) in enumerate(spans)
        ]

    def _cap(self, chunks: list[TextChunk]) -> list[TextChunk]:
        if len(chunks) > self.max_chunks:
            logger.warning(
                f"{__name__}:split - Dropping {len(chunks) - self.max_chunks} chunks over the "
                f"per-source cap of {self.max_chunks}"
            )
            return chunks[: self.max_chunks]
        return chunks
