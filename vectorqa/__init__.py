"""vectorqa: dual-vector retrieval-augmented question answering."""

__version__ = "0.1.0"
