"""
Exception hierarchy for the Librarian pipeline.

Provides layered exception structure for corpus, capability, generation
and training errors. All exceptions include context for observability.

Recoverable generation errors (extraction, schema, validation) are retried
by the RetryController; capability failures and exhausted budgets surface
to the caller as per-item failures.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the pipeline
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from librarian.models.artifact import ValidationReport


class LibrarianException(Exception):
    """Base exception for all Librarian errors."""

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


class CorpusError(LibrarianException):
    """Raised when a chunk corpus is malformed (duplicate ids, bad records)."""

    pass


class CapabilityFailure(LibrarianException):
    """Raised when the embedding or generation runtime itself fails."""

    def __init__(
        self,
        message: str,
        capability: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize capability failure.

        Args:
            message: Error message
            capability: Capability that failed ("embed" or "generate")
            details: Additional context
        """
        details = details or {}
        if capability:
            details["capability"] = capability
        super().__init__(message, details)


class EmbeddingDimensionError(CapabilityFailure):
    """Raised when an embedding's dimensionality differs from the corpus."""

    def __init__(self, expected: int, actual: int, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details.update({"expected": expected, "actual": actual})
        super().__init__("Embedding dimension mismatch", "embed", details)


class RecoverableGenerationError(LibrarianException):
    """Base class for generation failures the retry loop handles locally."""

    @property
    def reasons(self) -> list[str]:
        """Human-readable reasons used as corrective feedback."""
        return [self.message]


class ExtractionFailure(RecoverableGenerationError):
    """Raised when no well-formed JSON value can be located in model output."""

    def __init__(self, message: str, raw_output: str = "", details: dict[str, Any] | None = None) -> None:
        details = details or {}
        if raw_output:
            details["raw_preview"] = raw_output[:200]
        super().__init__(message, details)


class SchemaFailure(RecoverableGenerationError):
    """Raised when extracted JSON is missing required fields or has wrong types."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message, {"errors": self.errors} if self.errors else None)

    @property
    def reasons(self) -> list[str]:
        return self.errors or [self.message]


class ValidationFailure(RecoverableGenerationError):
    """Raised when a parsed candidate violates a content rule."""

    def __init__(self, report: "ValidationReport") -> None:
        self.report = report
        super().__init__(
            "Generated artifact failed validation",
            {"reasons": list(report.reasons)},
        )

    @property
    def reasons(self) -> list[str]:
        return list(self.report.reasons)


class BudgetExhausted(LibrarianException):
    """Raised when all generation attempts for one chunk failed."""

    def __init__(
        self,
        chunk_id: str,
        attempts: int,
        last_reasons: list[str] | None = None,
    ) -> None:
        """
        Initialize budget exhausted error.

        Args:
            chunk_id: Chunk the artifact was requested for
            attempts: Number of attempts made
            last_reasons: Failure reasons from the final attempt
        """
        self.chunk_id = chunk_id
        self.attempts = attempts
        self.last_reasons = last_reasons or []
        super().__init__(
            f"No artifact generated for chunk {chunk_id} after {attempts} attempts",
            {"chunk_id": chunk_id, "attempts": attempts, "last_reasons": self.last_reasons},
        )


class GenerationCancelled(LibrarianException):
    """Raised when a cancel signal or timeout stops the retry loop early."""

    def __init__(self, chunk_id: str, attempts: int) -> None:
        self.chunk_id = chunk_id
        self.attempts = attempts
        super().__init__(
            f"Generation for chunk {chunk_id} cancelled after {attempts} attempts",
            {"chunk_id": chunk_id, "attempts": attempts},
        )


class TrainingError(LibrarianException):
    """Raised when checkpoint persistence or restoration fails."""

    pass
