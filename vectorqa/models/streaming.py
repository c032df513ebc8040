"""
Streaming event schemas for answer streaming.

A stream is zero or more DELTA events followed by exactly one
terminal event: COMPLETE on success, ERROR on failure.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel


class StreamEventType(str, Enum):
    """Server-to-client event types for streamed answers."""

    DELTA = "delta"
    COMPLETE = "complete"
    ERROR = "error"


TERMINAL_EVENTS = frozenset({StreamEventType.COMPLETE, StreamEventType.ERROR})


class StreamEvent(BaseModel):
    """
    Base streaming event model.

    Attributes:
        event: Event type identifier
        data: Event-specific payload
    """

    event: StreamEventType
    data: dict[str, Any]

    @property
    def is_terminal(self) -> bool:
        return self.event in TERMINAL_EVENTS

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {"event": self.event.value, "data": self.data}

    @classmethod
    def delta(cls, delta: str, text: str, index: int) -> "StreamEvent":
        return cls(event=StreamEventType.DELTA, data={"delta": delta, "text": text, "index": index})

    @classmethod
    def complete(cls, answer: str, citations: list[dict[str, Any]]) -> "StreamEvent":
        return cls(event=StreamEventType.COMPLETE, data={"answer": answer, "citations": citations})

    @classmethod
    def error(cls, code: str, message: str) -> "StreamEvent":
        return cls(event=StreamEventType.ERROR, data={"code": code, "message": message})
