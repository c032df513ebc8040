"""
Ingestion and merge models.

Dependencies: pydantic
System role: Batch ingestion inputs and reports
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


class IngestMode(str, Enum):
    """How a batch run treats the existing index."""

    CLEAR = "clear"
    RESUME = "resume"
    APPEND = "append"


class SourceDocument(BaseModel):
    """Already-extracted source text handed to the ingestion pipeline."""

    source_id: str = Field(min_length=1)
    text: str
    source_type: Literal["text", "web", "csv", "code"] = "text"
    metadata_extra: dict[str, Any] = Field(
        default_factory=dict,
        description="Variant fields (source_url, row_index, language, ...) and free-form extras",
    )
    questions: list[str] | None = Field(
        default=None,
        description="Pre-supplied questions; skips question generation when set",
    )


class IngestResult(BaseModel):
    """Outcome for one source."""

    source_id: str
    success: bool
    chunks_created: int = 0
    skipped: bool = False
    error: str | None = None


class IngestionSummary(BaseModel):
    """Outcome of a whole batch run."""

    results: list[IngestResult] = Field(default_factory=list)
    successful: int = 0
    failed: int = 0
    skipped: int = 0
    total_chunks: int = 0
    took_ms: float = 0.0

    def add(self, result: IngestResult) -> None:
        self.results.append(result)
        if result.skipped:
            self.skipped += 1
        elif result.success:
            self.successful += 1
            self.total_chunks += result.chunks_created
        else:
            self.failed += 1


class ImportReport(BaseModel):
    """Outcome of a deduplicating bulk import."""

    inserted: int = 0
    skipped: int = 0


class SourceMergeReport(ImportReport):
    """Per-source result of a store merge."""

    source: str
    error: str | None = None


class MergeReport(BaseModel):
    """Outcome of merging several stores into one."""

    sources: list[SourceMergeReport] = Field(default_factory=list)
    total_inserted: int = 0
    total_skipped: int = 0
    final_count: int = 0
