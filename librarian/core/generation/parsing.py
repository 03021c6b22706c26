"""
Candidate parsing.

Turns an extracted JSON payload into a typed candidate for the requested
artifact kind, cleans quiz options of leading labels such as ``A)`` and
builds the accepted artifact (including option shuffling) once a candidate
has passed validation.

Dependencies: pydantic, random
System role: JSON payload -> candidate -> accepted artifact
"""

import random
import re
from typing import Any

from pydantic import ValidationError

from librarian.core.exceptions import SchemaFailure
from librarian.models.artifact import (
    DEFAULT_EXPLANATION,
    ArtifactKind,
    Candidate,
    Flashcard,
    FlashcardCandidate,
    OpenEndedCandidate,
    OpenEndedQuestion,
    QuizCandidate,
    QuizQuestion,
)
from librarian.models.chunk import Chunk

OPEN_ENDED_CONTEXT_CHARS = 500

_OPTION_LABEL_PATTERNS = (
    re.compile(r"^[A-Da-d][\)\.\:]\s*"),
    re.compile(r"^[A-Da-d]\s+[\)\.\:]\s*"),
    re.compile(r"^\([A-Da-d]\)\s*"),
)

_CANDIDATE_TYPES: dict[ArtifactKind, type[Candidate]] = {
    ArtifactKind.QUIZ: QuizCandidate,
    ArtifactKind.FLASHCARD: FlashcardCandidate,
    ArtifactKind.OPEN_ENDED: OpenEndedCandidate,
}


def clean_option_label(option: str) -> str:
    """
    Strip a leading option label (``"A) "``, ``"b. "``, ``"C: "``, ``"(D) "``).

    Only the first matching label is removed.
    """
    option = option.strip()
    for pattern in _OPTION_LABEL_PATTERNS:
        cleaned = pattern.sub("", option, count=1)
        if cleaned != option:
            return cleaned.strip()
    return option


def _format_errors(error: ValidationError) -> list[str]:
    reasons = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "payload"
        reasons.append(f"{location}: {item['msg']}")
    return reasons


def parse_candidate(payload: Any, kind: ArtifactKind) -> Candidate:
    """
    Parse an extracted JSON value into a candidate.

    Flashcard and open-ended prompts sometimes come back as a one-element
    array; the first object of an array payload is used for every kind.

    Args:
        payload: Extracted JSON value
        kind: Artifact kind requested

    Returns:
        Candidate: Typed candidate with whitespace and option labels cleaned

    Raises:
        SchemaFailure: When required fields are missing or mistyped
    """
    if isinstance(payload, list):
        payload = next((item for item in payload if isinstance(item, dict)), None)
        if payload is None:
            raise SchemaFailure("JSON array contains no object", ["payload: expected an object"])
    if not isinstance(payload, dict):
        raise SchemaFailure("JSON value is not an object", ["payload: expected an object"])

    model = _CANDIDATE_TYPES[kind]
    try:
        candidate = model.model_validate(payload)
    except ValidationError as e:
        raise SchemaFailure(f"Output does not match {kind.value} schema", _format_errors(e)) from e

    if isinstance(candidate, QuizCandidate):
        return candidate.model_copy(
            update={
                "question": candidate.question.strip(),
                "options": [clean_option_label(option) for option in candidate.options],
                "explanation": candidate.explanation.strip() if candidate.explanation else None,
            }
        )
    if isinstance(candidate, FlashcardCandidate):
        return candidate.model_copy(
            update={"question": candidate.question.strip(), "answer": candidate.answer.strip()}
        )
    return candidate.model_copy(
        update={
            "question": candidate.question.strip(),
            "ideal_answer": candidate.ideal_answer.strip(),
            "key_points": [point.strip() for point in candidate.key_points if point.strip()],
        }
    )


def shuffle_options(
    options: list[str],
    correct_index: int,
    rng: random.Random | None = None,
) -> tuple[list[str], int]:
    """
    Shuffle options and remap the correct index to the same option.

    Args:
        options: Distinct option strings
        correct_index: Index of the correct option
        rng: Random source (module RNG when omitted)

    Returns:
        tuple[list[str], int]: Shuffled options and the new correct index
    """
    order = list(range(len(options)))
    (rng or random).shuffle(order)
    shuffled = [options[i] for i in order]
    return shuffled, order.index(correct_index)


def to_artifact(
    candidate: Candidate,
    chunk: Chunk,
    rng: random.Random | None = None,
    shuffle: bool = True,
) -> QuizQuestion | Flashcard | OpenEndedQuestion:
    """
    Build the accepted artifact for a validated candidate.

    Args:
        candidate: Candidate that passed validation
        chunk: Chunk it was generated from
        rng: Random source for option shuffling
        shuffle: Shuffle quiz options (models tend to put the answer first)

    Returns:
        Accepted artifact
    """
    if isinstance(candidate, QuizCandidate):
        options, correct_index = list(candidate.options), candidate.correct_index
        if shuffle:
            options, correct_index = shuffle_options(options, correct_index, rng)
        return QuizQuestion(
            question=candidate.question,
            options=options,
            correct_index=correct_index,
            explanation=candidate.explanation or DEFAULT_EXPLANATION,
            chunk_id=chunk.id,
            source=chunk.source,
        )
    if isinstance(candidate, FlashcardCandidate):
        return Flashcard(
            question=candidate.question,
            answer=candidate.answer,
            chunk_id=chunk.id,
            source=chunk.source,
        )
    return OpenEndedQuestion(
        question=candidate.question,
        ideal_answer=candidate.ideal_answer,
        key_points=tuple(candidate.key_points),
        chunk_id=chunk.id,
        source=chunk.source,
        context=chunk.text[:OPEN_ENDED_CONTEXT_CHARS],
    )
