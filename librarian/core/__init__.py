"""
Core business logic module.

Contains retrieval scoring, validated generation and training control,
plus the exception hierarchy shared by all layers.
"""

from librarian.core.exceptions import (
    BudgetExhausted,
    CapabilityFailure,
    CorpusError,
    EmbeddingDimensionError,
    ExtractionFailure,
    GenerationCancelled,
    LibrarianException,
    RecoverableGenerationError,
    SchemaFailure,
    TrainingError,
    ValidationFailure,
)

__all__ = [
    "LibrarianException",
    "CorpusError",
    "CapabilityFailure",
    "EmbeddingDimensionError",
    "RecoverableGenerationError",
    "ExtractionFailure",
    "SchemaFailure",
    "ValidationFailure",
    "BudgetExhausted",
    "GenerationCancelled",
    "TrainingError",
]
