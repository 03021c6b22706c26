"""
Generated artifact models.

Candidates mirror the JSON a model is asked to emit (camelCase keys such as
``correctIndex`` and ``idealAnswer``). They are deliberately permissive so the
validator, not the schema, reports content problems like a wrong option
count. Accepted artifacts are the study items handed back to callers.

Dependencies: pydantic
System role: Generated-artifact schema definitions
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_EXPLANATION = "The correct answer is based on the source material."


class ArtifactKind(str, Enum):
    """Kinds of study artifacts the pipeline can generate."""

    QUIZ = "quiz"
    FLASHCARD = "flashcard"
    OPEN_ENDED = "open_ended"


class Difficulty(str, Enum):
    """Question difficulty level."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class _CandidateModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class QuizCandidate(_CandidateModel):
    """Multiple choice question as parsed from model output."""

    question: str
    options: list[str]
    correct_index: int
    explanation: str | None = None


class FlashcardCandidate(_CandidateModel):
    """Flashcard as parsed from model output."""

    question: str
    answer: str


class OpenEndedCandidate(_CandidateModel):
    """Open-ended question as parsed from model output."""

    question: str
    ideal_answer: str
    key_points: list[str] = Field(default_factory=list)


Candidate = QuizCandidate | FlashcardCandidate | OpenEndedCandidate


class ValidationReport(BaseModel):
    """Outcome of validating one candidate. Always complete."""

    model_config = ConfigDict(frozen=True)

    passed: bool
    reasons: tuple[str, ...] = ()

    @classmethod
    def from_reasons(cls, reasons: list[str]) -> "ValidationReport":
        return cls(passed=not reasons, reasons=tuple(reasons))


class QuizQuestion(BaseModel):
    """Accepted multiple choice question."""

    model_config = ConfigDict(validate_assignment=True)

    question: str
    options: list[str]
    correct_index: int
    explanation: str = DEFAULT_EXPLANATION
    chunk_id: str
    source: str
    user_answer: int | None = None

    @model_validator(mode="after")
    def _check_options(self) -> "QuizQuestion":
        if len(set(self.options)) != len(self.options):
            raise ValueError("options must be distinct")
        if not 0 <= self.correct_index < len(self.options):
            raise ValueError("correct_index must index into options")
        if self.user_answer is not None and not 0 <= self.user_answer < len(self.options):
            raise ValueError("user_answer must index into options")
        return self

    def record_answer(self, index: int) -> None:
        """Attach the learner's chosen option."""
        self.user_answer = index

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_index]

    @property
    def is_correct(self) -> bool | None:
        if self.user_answer is None:
            return None
        return self.user_answer == self.correct_index


class Flashcard(BaseModel):
    """Accepted flashcard."""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str
    chunk_id: str
    source: str


class OpenEndedQuestion(BaseModel):
    """Accepted open-ended question with its reference answer."""

    model_config = ConfigDict(frozen=True)

    question: str
    ideal_answer: str
    key_points: tuple[str, ...] = ()
    chunk_id: str
    source: str
    context: str = ""


Artifact = QuizQuestion | Flashcard | OpenEndedQuestion


class GenerationResult(BaseModel):
    """Accepted artifact together with the number of attempts it took."""

    artifact: Artifact
    attempts: int = Field(ge=1)
    chunk_id: str


class DiscussionMessage(BaseModel):
    """One turn of a follow-up discussion about a study item."""

    model_config = ConfigDict(frozen=True)

    content: str
    is_user: bool
