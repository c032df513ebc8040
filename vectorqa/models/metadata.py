"""
Chunk metadata models.

Tagged variant keyed on source_type. Every variant shares the base
provenance fields; variant fields describe where the text came from.
Unknown keys go into the open ``extra`` map.

Dependencies: pydantic
System role: Per-chunk metadata schema
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class ChunkingStrategy(str, Enum):
    """How a chunk was produced from its source."""

    FIXED_SIZE = "fixed-size"
    SEMANTIC = "semantic"
    WHOLE = "whole"


class BaseChunkMetadata(BaseModel):
    """Fields present on every chunk regardless of source type."""

    ingestion_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    chunking_strategy: ChunkingStrategy = ChunkingStrategy.WHOLE
    embedding_model: str = ""
    chunk_index: int = Field(default=0, ge=0)
    total_chunks: int = Field(default=1, ge=1)
    char_start: int | None = Field(default=None, ge=0)
    char_end: int | None = Field(default=None, ge=0)
    extra: dict[str, Any] = Field(default_factory=dict)


class TextSourceMetadata(BaseChunkMetadata):
    """Plain text or extracted document (PDF, markdown, etc.)."""

    source_type: Literal["text"] = "text"
    file_name: str | None = None


class WebPageMetadata(BaseChunkMetadata):
    """Page fetched from a website or sitemap."""

    source_type: Literal["web"] = "web"
    source_url: str
    page_title: str | None = None
    page_description: str | None = None
    sitemap_source: str | None = None
    lastmod: str | None = None
    priority: float | None = None


class TabularRowMetadata(BaseChunkMetadata):
    """One row of a CSV or spreadsheet source."""

    source_type: Literal["csv"] = "csv"
    row_index: int = Field(ge=0)
    schema_mapping: dict[str, str] = Field(default_factory=dict)
    columns: dict[str, str] = Field(default_factory=dict)


class CodeFileMetadata(BaseChunkMetadata):
    """Source code file."""

    source_type: Literal["code"] = "code"
    language: str | None = None
    line_count: int | None = Field(default=None, ge=0)


ChunkMetadata = Annotated[
    Union[TextSourceMetadata, WebPageMetadata, TabularRowMetadata, CodeFileMetadata],
    Field(discriminator="source_type"),
]

_metadata_adapter: TypeAdapter = TypeAdapter(ChunkMetadata)


def parse_metadata(data: dict[str, Any]) -> BaseChunkMetadata:
    """
    Validate a raw metadata mapping into its tagged variant.

    Args:
        data: Mapping with a ``source_type`` key

    Returns:
        BaseChunkMetadata: Concrete metadata variant

    Raises:
        pydantic.ValidationError: When the tag or fields are invalid
    """
    return _metadata_adapter.validate_python(data)


METADATA_VARIANTS: dict[str, type[BaseChunkMetadata]] = {
    "text": TextSourceMetadata,
    "web": WebPageMetadata,
    "csv": TabularRowMetadata,
    "code": CodeFileMetadata,
}


def variant_fields(source_type: str) -> set[str]:
    """Field names specific to one metadata variant."""
    variant = METADATA_VARIANTS[source_type]
    return set(variant.model_fields) - set(BaseChunkMetadata.model_fields) - {"source_type"}
