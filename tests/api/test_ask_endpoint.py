"""
Test suite for the ask endpoints.

Tests full answers and the SSE stream: frame format, terminal error
events mid-stream, and HTTP errors raised before streaming starts.

System role: Verification of question answering HTTP API
"""

import json

from langchain_core.messages import HumanMessage

from vectorqa.core.answering.answer_stream import AnswerStream
from vectorqa.core.exceptions import ModelUnavailableError, ValidationError
from vectorqa.models.answer import AskResponse, Citation


def _parse_sse(text: str) -> list[tuple[str, dict]]:
    events = []
    for frame in text.strip().split("\n\n"):
        lines = dict(line.split(": ", 1) for line in frame.splitlines())
        events.append((lines["event"], json.loads(lines["data"])))
    return events


def _stream_factory(model):
    async def open_stream(request):
        return AnswerStream(
            model=model,
            messages=[HumanMessage(content=request.question)],
            results=[],
            citations=[Citation(source_id="sky.txt", chunk_index=0, score=0.9, snippet="The sky")],
        )

    return open_stream


class TestAskEndpoint:
    def test_ask_should_return_answer_with_citations(self, client, mock_query_service):
        # Arrange
        mock_query_service.ask.return_value = AskResponse(
            answer="Blue.",
            citations=[Citation(source_id="sky.txt", chunk_index=0, score=0.9, snippet="The sky")],
            took_ms=12.0,
        )

        # Act
        response = client.post("/api/v1/ask", json={"question": "What color is the sky?"})

        # Assert
        assert response.status_code == 200
        assert response.json()["answer"] == "Blue."
        assert response.json()["citations"][0]["source_id"] == "sky.txt"

    def test_ask_model_unavailable_should_return_503(self, client, mock_query_service):
        # Arrange
        mock_query_service.ask.side_effect = ModelUnavailableError("down", backend="answer")

        # Act
        response = client.post("/api/v1/ask", json={"question": "Q?"})

        # Assert
        assert response.status_code == 503
        assert response.json()["details"]["code"] == "MODEL_UNAVAILABLE"

    def test_ask_invalid_answer_length_should_be_rejected(self, client):
        # Act
        response = client.post("/api/v1/ask", json={"question": "Q?", "max_answer_length": 0})

        # Assert
        assert response.status_code == 422


class TestAskStreamEndpoint:
    def test_stream_should_emit_sse_deltas_then_complete(self, client, mock_query_service, scripted_chat_model):
        # Arrange
        model = scripted_chat_model(tokens=["The sky ", "is blue."])
        mock_query_service.ask_stream.side_effect = _stream_factory(model)

        # Act
        response = client.post("/api/v1/ask/stream", json={"question": "What color is the sky?"})

        # Assert
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        events = _parse_sse(response.text)
        assert [name for name, _ in events] == ["delta", "delta", "complete"]
        assert events[1][1]["text"] == "The sky is blue."
        assert events[2][1]["citations"][0]["source_id"] == "sky.txt"

    def test_stream_failure_should_end_with_error_event(self, client, mock_query_service, scripted_chat_model):
        # Arrange
        model = scripted_chat_model(tokens=["a", "b", "c", "d"], fail_after=3)
        mock_query_service.ask_stream.side_effect = _stream_factory(model)

        # Act
        response = client.post("/api/v1/ask/stream", json={"question": "Q?"})

        # Assert
        events = _parse_sse(response.text)
        assert [name for name, _ in events] == ["delta", "delta", "delta", "error"]
        assert events[-1][1]["code"] == "MODEL_UNAVAILABLE"

    def test_stream_validation_error_should_return_400_before_streaming(self, client, mock_query_service):
        # Arrange
        mock_query_service.ask_stream.side_effect = ValidationError("Query must not be empty", field="query")

        # Act
        response = client.post("/api/v1/ask/stream", json={"question": "  "})

        # Assert
        assert response.status_code == 400
        assert response.json()["details"]["code"] == "VALIDATION_ERROR"
