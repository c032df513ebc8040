"""
Question synthesizer.

Generates hypothetical questions a chunk could answer. Their embeddings
are stored next to the content embedding so that question-shaped queries
match the chunk even when its wording differs.

Failure for one chunk is never fatal to ingestion: generate_or_empty()
logs and returns no questions, and the chunk is indexed without them.

Dependencies: langchain_core, vectorqa.boundary.models
System role: Second stage of the ingestion pipeline
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable

from langchain_core.language_models.chat_models import BaseChatModel

from vectorqa.boundary.models.chat_models import message_text
from vectorqa.boundary.models.initializer import OnceInitializer
from vectorqa.core.exceptions import ModelTimeoutError, ModelUnavailableError
from vectorqa.core.indexing.question_prompt import QUESTION_PROMPT
from vectorqa.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)

ChatModelFactory = Callable[[], Awaitable[BaseChatModel]]

_LINE_PREFIX_RE = re.compile(r"^\s*(?:(?:q(?:uestion)?\s*)?\d+\s*[.):\-]|[-*•])\s*", re.IGNORECASE)


def parse_questions(raw: str, limit: int) -> list[str]:
    """
    Parse model output into at most ``limit`` questions.

    Strips numbering and bullets, drops blank lines and duplicates. When
    any line is a question (contains "?"), lines that are not are dropped
    as commentary.

    Args:
        raw: Model output, one question per line
        limit: Maximum questions to keep

    Returns:
        list[str]: Questions in model order
    """
    lines = []
    for line in raw.splitlines():
        cleaned = _LINE_PREFIX_RE.sub("", line).strip().strip('"').strip()
        if cleaned:
            lines.append(cleaned)

    if any("?" in line for line in lines):
        lines = [line for line in lines if "?" in line]

    return select_questions(lines, limit)


def select_questions(candidates: list[str], limit: int) -> list[str]:
    """
    Keep the first ``limit`` distinct questions.

    Used for model output and for questions supplied with a source.
    Blank entries are dropped; duplicates compare case-insensitively.

    Args:
        candidates: Questions in preferred order
        limit: Maximum questions to keep

    Returns:
        list[str]: Stripped questions in input order
    """
    questions: list[str] = []
    seen: set[str] = set()
    for candidate in candidates:
        if len(questions) >= limit:
            break
        question = candidate.strip()
        key = question.casefold()
        if not question or key in seen:
            continue
        seen.add(key)
        questions.append(question)
    return questions


class QuestionSynthesizer:
    """Generate up to Q questions per chunk with a chat model."""

    def __init__(
        self,
        model_factory: ChatModelFactory,
        questions_per_chunk: int = 5,
        timeout_seconds: float = 30.0,
    ) -> None:
        """
        Args:
            model_factory: Coroutine function returning the chat model (called once)
            questions_per_chunk: Questions requested per chunk (Q)
            timeout_seconds: Upper bound for one generation call
        """
        self.questions_per_chunk = questions_per_chunk
        self._timeout_seconds = timeout_seconds
        self._initializer: OnceInitializer[BaseChatModel] = OnceInitializer(model_factory, name="question")

    @classmethod
    def from_model(cls, model: BaseChatModel, **kwargs) -> "QuestionSynthesizer":
        """Wrap an already constructed chat model."""

        async def factory() -> BaseChatModel:
            return model

        return cls(factory, **kwargs)

    @property
    def is_initialized(self) -> bool:
        return self._initializer.is_initialized

    async def initialize(self) -> None:
        """One-time backend initialization; idempotent and concurrency-safe."""
        await self._initializer.get()

    async def generate(self, chunk_text: str) -> list[str]:
        """
        Generate questions for one chunk.

        Args:
            chunk_text: Chunk text

        Returns:
            list[str]: Between 0 and questions_per_chunk questions

        Raises:
            ModelUnavailableError: Backend failure
            ModelTimeoutError: Call exceeded its timeout
        """
        if self.questions_per_chunk <= 0 or not chunk_text.strip():
            return []

        model = await self._initializer.get()
        messages = QUESTION_PROMPT.format_messages(count=self.questions_per_chunk, chunk=chunk_text)
        try:
            response = await asyncio.wait_for(model.ainvoke(messages), timeout=self._timeout_seconds)
        except asyncio.TimeoutError as e:
            raise ModelTimeoutError("question", self._timeout_seconds) from e
        except Exception as e:
            raise ModelUnavailableError(
                f"Question generation failed: {type(e).__name__}",
                backend="question",
            ) from e

        questions = parse_questions(message_text(response.content), self.questions_per_chunk)
        if len(questions) < self.questions_per_chunk:
            logger.debug(
                f"{__name__}:generate - Model returned {len(questions)}/{self.questions_per_chunk} questions"
            )
        return questions

    async def generate_or_empty(
        self,
        chunk_text: str,
        source_id: str | None = None,
        chunk_index: int | None = None,
    ) -> list[str]:
        """Like generate(), but a backend failure yields no questions instead of raising."""
        try:
            return await self.generate(chunk_text)
        except ModelUnavailableError as e:
            log_with_context(
                logger,
                logging.WARNING,
                f"{__name__}:generate_or_empty - Indexing chunk without questions: {e.message}",
                source_id=source_id,
                chunk_index=chunk_index,
                error_type=type(e).__name__,
            )
            return []
