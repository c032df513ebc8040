"""
Answer synthesizer.

Builds one prompt from ranked chunks and the verbatim question, then
either returns the full answer with citations or opens an AnswerStream
of incremental events.

Dependencies: langchain_core, vectorqa.boundary.models, vectorqa.core.answering
System role: Language-model-backed answer generation
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from langchain_core.language_models.chat_models import BaseChatModel

from vectorqa.boundary.models.chat_models import message_text
from vectorqa.boundary.models.initializer import OnceInitializer
from vectorqa.core.answering.answer_prompt import build_answer_messages
from vectorqa.core.answering.answer_stream import AnswerStream
from vectorqa.core.exceptions import ModelTimeoutError, ModelUnavailableError, ValidationError
from vectorqa.models.answer import AnswerResult, Citation
from vectorqa.models.search import SearchResult

logger = logging.getLogger(__name__)

ChatModelFactory = Callable[[], Awaitable[BaseChatModel]]

SNIPPET_LENGTH = 200


def build_citations(results: list[SearchResult]) -> list[Citation]:
    """One citation per context chunk, in rank order."""
    return [
        Citation(
            source_id=result.source_id,
            chunk_index=result.chunk_index,
            score=result.score,
            snippet=result.chunk_text[:SNIPPET_LENGTH],
        )
        for result in results
    ]


class AnswerSynthesizer:
    """Answer questions from retrieved chunks with a chat model."""

    def __init__(
        self,
        model_factory: ChatModelFactory,
        default_max_answer_length: int = 800,
        answer_timeout_seconds: float = 60.0,
        token_timeout_seconds: float = 30.0,
    ) -> None:
        """
        Args:
            model_factory: Coroutine function returning the chat model (called once)
            default_max_answer_length: Target answer length when the caller gives none
            answer_timeout_seconds: Upper bound for a full (non-streamed) answer
            token_timeout_seconds: Upper bound for each streamed chunk
        """
        self.default_max_answer_length = default_max_answer_length
        self._answer_timeout_seconds = answer_timeout_seconds
        self._token_timeout_seconds = token_timeout_seconds
        self._initializer: OnceInitializer[BaseChatModel] = OnceInitializer(model_factory, name="answer")

    @classmethod
    def from_model(cls, model: BaseChatModel, **kwargs) -> "AnswerSynthesizer":
        """Wrap an already constructed chat model."""

        async def factory() -> BaseChatModel:
            return model

        return cls(factory, **kwargs)

    def _max_length(self, max_answer_length: int | None) -> int:
        if max_answer_length is None:
            return self.default_max_answer_length
        if max_answer_length <= 0:
            raise ValidationError("max_answer_length must be positive", field="max_answer_length")
        return max_answer_length

    async def answer(
        self,
        question: str,
        results: list[SearchResult],
        max_answer_length: int | None = None,
        system_prompt: str | None = None,
    ) -> AnswerResult:
        """
        Produce a full answer.

        Args:
            question: User question, passed verbatim
            results: Ranked context chunks (may be empty)
            max_answer_length: Target answer length in characters
            system_prompt: Override for the default system prompt

        Returns:
            AnswerResult: Answer text and citations

        Raises:
            ValidationError: Invalid max_answer_length
            ModelUnavailableError: Backend failure
            ModelTimeoutError: Answer exceeded its timeout
        """
        messages = build_answer_messages(question, results, self._max_length(max_answer_length), system_prompt)
        model = await self._initializer.get()

        logger.info(f"{__name__}:answer - START context_chunks={len(results)}, question_len={len(question)}")
        try:
            response = await asyncio.wait_for(model.ainvoke(messages), timeout=self._answer_timeout_seconds)
        except asyncio.TimeoutError as e:
            raise ModelTimeoutError("answer", self._answer_timeout_seconds) from e
        except Exception as e:
            raise ModelUnavailableError(
                f"Answer generation failed: {type(e).__name__}",
                backend="answer",
            ) from e

        answer = message_text(response.content)
        logger.info(f"{__name__}:answer - END answer_len={len(answer)}")
        return AnswerResult(answer=answer, citations=build_citations(results))

    async def stream(
        self,
        question: str,
        results: list[SearchResult],
        max_answer_length: int | None = None,
        system_prompt: str | None = None,
    ) -> AnswerStream:
        """
        Open a streamed answer. The model is only called once iteration starts.

        Args:
            question: User question, passed verbatim
            results: Ranked context chunks (may be empty)
            max_answer_length: Target answer length in characters
            system_prompt: Override for the default system prompt

        Returns:
            AnswerStream: Channel yielding delta events then one terminal event

        Raises:
            ValidationError: Invalid max_answer_length
            ModelUnavailableError: Backend could not be initialized
        """
        messages = build_answer_messages(question, results, self._max_length(max_answer_length), system_prompt)
        model = await self._initializer.get()
        return AnswerStream(
            model=model,
            messages=messages,
            results=results,
            citations=build_citations(results),
            token_timeout_seconds=self._token_timeout_seconds,
        )
