"""
Domain models.

Pydantic models shared by the retrieval, generation and training layers.
"""

from librarian.models.artifact import (
    ArtifactKind,
    Difficulty,
    DiscussionMessage,
    Flashcard,
    FlashcardCandidate,
    GenerationResult,
    OpenEndedCandidate,
    OpenEndedQuestion,
    QuizCandidate,
    QuizQuestion,
    ValidationReport,
)
from librarian.models.chunk import Chunk, Document, count_words
from librarian.models.retrieval import CorpusSnapshot, FusedResult, ScoredChunk
from librarian.models.training import (
    CheckpointHandle,
    StopReason,
    TrainingDecision,
    TrainingPhase,
    TrainingProgress,
    TrainingReport,
    TrainingRunState,
)

__all__ = [
    "ArtifactKind",
    "Difficulty",
    "DiscussionMessage",
    "Chunk",
    "Document",
    "count_words",
    "CorpusSnapshot",
    "FusedResult",
    "ScoredChunk",
    "QuizCandidate",
    "FlashcardCandidate",
    "OpenEndedCandidate",
    "QuizQuestion",
    "Flashcard",
    "OpenEndedQuestion",
    "GenerationResult",
    "ValidationReport",
    "CheckpointHandle",
    "StopReason",
    "TrainingDecision",
    "TrainingPhase",
    "TrainingProgress",
    "TrainingReport",
    "TrainingRunState",
]
