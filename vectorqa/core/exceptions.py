"""
Exception hierarchy for the vectorqa application.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.
An empty retrieval is not an error and never raises.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class VectorQAException(Exception):
    """Base exception for all vectorqa application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(VectorQAException):
    """Raised when a request is malformed. Never retried."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class IngestionError(VectorQAException):
    """Raised when a single source cannot be indexed."""

    def __init__(
        self,
        message: str,
        source_id: str,
        cause: BaseException | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize ingestion error.

        Args:
            message: Error message
            source_id: Identifier of the source that failed
            cause: Underlying exception, if any
            details: Additional context
        """
        details = details or {}
        details["source_id"] = source_id
        if cause is not None:
            details["cause"] = type(cause).__name__
        self.source_id = source_id
        self.cause = cause
        super().__init__(message, details)


class ModelUnavailableError(VectorQAException):
    """Raised when an embedding or language model backend cannot serve a call."""

    retryable: bool = True

    def __init__(
        self,
        message: str,
        backend: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize model unavailable error.

        Args:
            message: Error message
            backend: Backend that failed (embedding, question, answer)
            details: Additional context
        """
        details = details or {}
        if backend:
            details["backend"] = backend
        super().__init__(message, details)


class ModelTimeoutError(ModelUnavailableError):
    """Raised when a model call exceeds its time budget."""

    def __init__(
        self,
        backend: str,
        timeout_seconds: float,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["timeout_seconds"] = timeout_seconds
        super().__init__(
            f"{backend} call timed out after {timeout_seconds}s",
            backend=backend,
            details=details,
        )


class VectorStoreError(VectorQAException):
    """Raised when vector store operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (insert, scan, nearest, clear, import)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class EmbeddingMismatchError(VectorStoreError):
    """
    Raised when an embedding model or dimension differs from the index generation.

    Checked on every insert and before a query is scored.
    """

    def __init__(
        self,
        expected_model: str,
        expected_dimension: int,
        actual_model: str,
        actual_dimension: int | None,
        operation: str = "insert",
    ) -> None:
        super().__init__(
            "Embedding model or dimension does not match the index generation",
            operation=operation,
            details={
                "expected_model": expected_model,
                "expected_dimension": expected_dimension,
                "actual_model": actual_model,
                "actual_dimension": actual_dimension,
            },
        )
