"""Answer synthesis, full and streamed."""

from vectorqa.core.answering.answer_stream import AnswerStream
from vectorqa.core.answering.answer_synthesizer import AnswerSynthesizer, build_citations

__all__ = ["AnswerStream", "AnswerSynthesizer", "build_citations"]
