"""Ingestion: question synthesis and per-source indexing."""

from vectorqa.core.indexing.ingestion_pipeline import IngestionPipeline, build_chunk_metadata
from vectorqa.core.indexing.question_synthesizer import QuestionSynthesizer, parse_questions

__all__ = ["IngestionPipeline", "QuestionSynthesizer", "build_chunk_metadata", "parse_questions"]
