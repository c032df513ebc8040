"""
Streamed answer channel.

A producer task drains the chat model's token stream into a bounded
queue; the consumer iterates StreamEvents from the queue. The event
sequence is zero or more DELTA events (each carrying the new text and
the strictly growing cumulative text) followed by exactly one terminal
COMPLETE or ERROR event. Nothing follows the terminal event.

Closing the channel, or cancelling it, cancels the producer, which in
turn closes the model stream and releases its connection. A failed
stream is never retried mid-flight.

A model that returns no chunks at all counts as a failed call and ends
in ERROR; chunks that carry no text are skipped.

Dependencies: asyncio, langchain_core
System role: Producer/consumer channel behind streamed answers
"""

import asyncio
import logging
from collections.abc import AsyncIterator

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage

from vectorqa.boundary.models.chat_models import message_text
from vectorqa.models.answer import Citation
from vectorqa.models.search import SearchResult
from vectorqa.models.streaming import StreamEvent
from vectorqa.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

ERROR_MODEL_TIMEOUT = "MODEL_TIMEOUT"
ERROR_MODEL_UNAVAILABLE = "MODEL_UNAVAILABLE"


class AnswerStream:
    """Async-iterable channel of StreamEvents for one streamed answer."""

    def __init__(
        self,
        model: BaseChatModel,
        messages: list[BaseMessage],
        results: list[SearchResult],
        citations: list[Citation],
        token_timeout_seconds: float = 30.0,
        max_buffered_events: int = 64,
    ) -> None:
        """
        Args:
            model: Initialized chat model
            messages: Prompt messages
            results: Retrieval results the answer is grounded on
            citations: Citations reported in the COMPLETE event
            token_timeout_seconds: Upper bound for waiting on each model chunk
            max_buffered_events: Queue capacity between producer and consumer
        """
        self._model = model
        self._messages = messages
        self.results = results
        self.citations = citations
        self._token_timeout_seconds = token_timeout_seconds
        self._queue: asyncio.Queue[StreamEvent] = asyncio.Queue(maxsize=max_buffered_events)
        self._producer: asyncio.Task | None = None
        self._finished = False
        self.answer = ""

    def __aiter__(self) -> "AnswerStream":
        return self

    async def __anext__(self) -> StreamEvent:
        if self._finished:
            raise StopAsyncIteration
        if self._producer is None:
            self._producer = asyncio.create_task(self._produce())

        event = await self._queue.get()
        if event.is_terminal:
            self._finished = True
        return event

    async def __aenter__(self) -> "AnswerStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def finished(self) -> bool:
        return self._finished

    async def aclose(self) -> None:
        """Stop the stream; no further events are delivered or requested."""
        self._finished = True
        producer = self._producer
        if producer is not None and not producer.done():
            producer.cancel()
            await asyncio.wait([producer])
            logger.info(f"{__name__}:aclose - Producer cancelled after {len(self.answer)} chars")

    async def _produce(self) -> None:
        stream = self._model.astream(self._messages)
        iterator = stream.__aiter__()
        index = 0
        try:
            while True:
                try:
                    chunk = await asyncio.wait_for(iterator.__anext__(), timeout=self._token_timeout_seconds)
                except StopAsyncIteration:
                    break
                delta = message_text(chunk.content)
                if not delta:
                    continue
                self.answer += delta
                await self._queue.put(StreamEvent.delta(delta, self.answer, index))
                index += 1

            logger.info(f"{__name__}:_produce - Streamed {index} deltas, answer_len={len(self.answer)}")
            await self._queue.put(
                StreamEvent.complete(self.answer, [c.model_dump() for c in self.citations])
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"{__name__}:_produce - No model output within {self._token_timeout_seconds}s after {index} deltas"
            )
            await self._queue.put(
                StreamEvent.error(ERROR_MODEL_TIMEOUT, "The language model stopped responding")
            )
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_produce - Model stream failed after {index} deltas",
                e,
                deltas=index,
            )
            await self._queue.put(
                StreamEvent.error(ERROR_MODEL_UNAVAILABLE, "The language model failed while answering")
            )
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()
