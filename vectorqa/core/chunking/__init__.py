"""Source text chunking."""

from vectorqa.core.chunking.chunk_splitter import ChunkSplitter

__all__ = ["ChunkSplitter"]
