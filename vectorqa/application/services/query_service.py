"""
Query service for search and question answering.

Orchestrates retrieval and answer synthesis for the API layer and
measures end-to-end latency.

Dependencies: vectorqa.core.retrieval, vectorqa.core.answering
System role: Query orchestration layer
"""

import logging
import time

from vectorqa.core.answering.answer_stream import AnswerStream
from vectorqa.core.answering.answer_synthesizer import AnswerSynthesizer
from vectorqa.core.retrieval.retrieval_engine import RetrievalEngine
from vectorqa.models.answer import AskRequest, AskResponse
from vectorqa.models.search import SearchRequest, SearchResponse

logger = logging.getLogger(__name__)


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


class QueryService:
    """Search and ask over the vector index."""

    def __init__(
        self,
        retrieval_engine: RetrievalEngine,
        answer_synthesizer: AnswerSynthesizer,
    ) -> None:
        self.retrieval_engine = retrieval_engine
        self.answer_synthesizer = answer_synthesizer

    async def search(self, request: SearchRequest) -> SearchResponse:
        """
        Rank chunks for a query.

        Raises:
            ValidationError: Invalid parameters
            ModelUnavailableError: Embedding backend failure
        """
        start_time = time.perf_counter()
        results = await self.retrieval_engine.search(
            request.query,
            top_k=request.top_k,
            threshold=request.similarity_threshold,
        )
        return SearchResponse(results=results, query=request.query, took_ms=_elapsed_ms(start_time))

    async def ask(self, request: AskRequest) -> AskResponse:
        """
        Retrieve context and synthesize a full answer.

        Flow:
        1. Retrieve ranked chunks for the question
        2. Answer from those chunks (empty context is allowed)

        Raises:
            ValidationError: Invalid parameters
            ModelUnavailableError: Embedding or language model failure
        """
        start_time = time.perf_counter()
        results = await self.retrieval_engine.search(
            request.question,
            top_k=request.top_k,
            threshold=request.similarity_threshold,
        )
        answer = await self.answer_synthesizer.answer(
            request.question,
            results,
            max_answer_length=request.max_answer_length,
            system_prompt=request.system_prompt,
        )
        took_ms = _elapsed_ms(start_time)
        logger.info(f"{__name__}:ask - context_chunks={len(results)}, took_ms={took_ms}")
        return AskResponse(answer=answer.answer, citations=answer.citations, took_ms=took_ms)

    async def ask_stream(self, request: AskRequest) -> AnswerStream:
        """
        Retrieve context, then open a streamed answer.

        Retrieval completes before the stream is returned, so its errors
        surface here rather than inside the stream.

        Raises:
            ValidationError: Invalid parameters
            ModelUnavailableError: Embedding or language model failure
        """
        results = await self.retrieval_engine.search(
            request.question,
            top_k=request.top_k,
            threshold=request.similarity_threshold,
        )
        logger.info(f"{__name__}:ask_stream - Opening stream with {len(results)} context chunks")
        return await self.answer_synthesizer.stream(
            request.question,
            results,
            max_answer_length=request.max_answer_length,
            system_prompt=request.system_prompt,
        )
