"""Query-side retrieval."""

from vectorqa.core.retrieval.retrieval_engine import RetrievalEngine, rank_records, score_record

__all__ = ["RetrievalEngine", "rank_records", "score_record"]
