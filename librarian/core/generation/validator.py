"""
Artifact validator.

Checks parsed candidates against content rules. Every applicable rule is
evaluated so the report lists all violations at once; the reasons are fed
back to the model as corrective feedback on the next attempt.

Quiz rules:
    - non-empty question of at least 15 characters
    - no vague references to the source ("the text", "the author", ...) and
      no leading pronoun without an antecedent
    - exactly 4 options, mutually distinct (case-sensitive)
    - no placeholder options ("option1", "answer2", "...", case-insensitive)
    - no malformed options (brackets, embedded "a)".."d)" labels, "option",
      "answer" or "example" text)
    - no option of length <= 1
    - all options of one type (year, number, name or phrase)
    - correctIndex within [0, 4) and pointing at an existing option

Flashcard / open-ended rules:
    - non-empty question
    - non-empty answer of at least ``min_answer_chars`` characters

Dependencies: re, librarian.core.generation.quality
System role: Content gate between parsing and acceptance
"""

import logging
import re
from enum import Enum

from librarian.core.generation.quality import LEADING_PRONOUNS, VAGUE_REFERENCES
from librarian.models.artifact import (
    ArtifactKind,
    Candidate,
    FlashcardCandidate,
    OpenEndedCandidate,
    QuizCandidate,
    ValidationReport,
)

logger = logging.getLogger(__name__)

REQUIRED_OPTIONS = 4
MIN_ANSWER_CHARS = 20
MIN_QUESTION_CHARS = 15

PLACEHOLDER_OPTIONS = frozenset(
    {
        "option1",
        "option2",
        "option3",
        "option4",
        "option 1",
        "option 2",
        "option 3",
        "option 4",
        "answer1",
        "answer2",
        "...",
    }
)

MALFORMED_OPTION_PATTERNS = ("...", "[", "]", "option", "answer", "example", "a)", "b)", "c)", "d)")

_YEAR_PATTERN = re.compile(r"^\d{4}\s*(BCE|CE|AD|BC)?$")
_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


class OptionType(str, Enum):
    """Coarse shape of an answer option."""

    YEAR = "year"
    NUMBER = "number"
    NAME = "name"
    PHRASE = "phrase"


def classify_option(option: str) -> OptionType:
    """
    Classify an option as a year, number, proper name or free phrase.

    A name is one to four words that all start with an uppercase letter.
    """
    trimmed = option.strip()
    if _YEAR_PATTERN.match(trimmed):
        return OptionType.YEAR
    if _NUMBER_PATTERN.match(trimmed):
        return OptionType.NUMBER

    words = trimmed.split(" ")
    if len(words) <= 4 and all(word[:1].isupper() for word in words):
        return OptionType.NAME
    return OptionType.PHRASE


class ArtifactValidator:
    """Rule-based validator for generated candidates."""

    def __init__(self, min_answer_chars: int = MIN_ANSWER_CHARS) -> None:
        self.min_answer_chars = min_answer_chars

    def validate(self, candidate: Candidate, kind: ArtifactKind) -> ValidationReport:
        """
        Validate a candidate.

        Args:
            candidate: Parsed candidate
            kind: Artifact kind the candidate was requested as

        Returns:
            ValidationReport: Pass/fail with every violated rule
        """
        reasons: list[str] = []

        if not candidate.question.strip():
            reasons.append("Question is empty")

        if kind is ArtifactKind.QUIZ:
            if not isinstance(candidate, QuizCandidate):
                reasons.append("Candidate is not a quiz question")
            else:
                reasons.extend(self._quiz_reasons(candidate))
        elif kind is ArtifactKind.FLASHCARD:
            if not isinstance(candidate, FlashcardCandidate):
                reasons.append("Candidate is not a flashcard")
            else:
                reasons.extend(self._answer_reasons(candidate.answer, "Answer"))
        else:
            if not isinstance(candidate, OpenEndedCandidate):
                reasons.append("Candidate is not an open-ended question")
            else:
                reasons.extend(self._answer_reasons(candidate.ideal_answer, "Ideal answer"))

        report = ValidationReport.from_reasons(reasons)
        if not report.passed:
            logger.debug(f"{__name__}:validate - {kind.value} rejected: {reasons}")
        return report

    def _quiz_reasons(self, candidate: QuizCandidate) -> list[str]:
        reasons = []
        options = candidate.options
        question = candidate.question.strip()

        if question and len(question) < MIN_QUESTION_CHARS:
            reasons.append(f"Question is shorter than {MIN_QUESTION_CHARS} characters")

        lowered = question.lower()
        vague = [phrase for phrase in VAGUE_REFERENCES if phrase in lowered]
        if vague:
            reasons.append(f"Question must stand alone; vague references: {vague}")
        if lowered.startswith(LEADING_PRONOUNS):
            reasons.append("Question starts with a pronoun that has no antecedent")

        if len(options) != REQUIRED_OPTIONS:
            reasons.append(f"Expected exactly {REQUIRED_OPTIONS} options, got {len(options)}")

        if len(set(options)) != len(options):
            duplicates = sorted({option for option in options if options.count(option) > 1})
            reasons.append(f"Options must be distinct; duplicated: {duplicates}")

        placeholders = [option for option in options if option.strip().lower() in PLACEHOLDER_OPTIONS]
        if placeholders:
            reasons.append(f"Options contain placeholder text: {placeholders}")

        malformed = [
            option
            for option in options
            if option.strip().lower() not in PLACEHOLDER_OPTIONS
            and any(pattern in option.lower() for pattern in MALFORMED_OPTION_PATTERNS)
        ]
        if malformed:
            reasons.append(f"Options contain brackets, labels or template words: {malformed}")

        too_short = [option for option in options if len(option.strip()) <= 1]
        if too_short:
            reasons.append(f"Options must be longer than one character: {too_short}")

        types = sorted({classify_option(option).value for option in options})
        if len(types) > 1:
            reasons.append(f"Options must all be the same type; found: {types}")

        if not 0 <= candidate.correct_index < REQUIRED_OPTIONS:
            reasons.append(f"correctIndex {candidate.correct_index} is outside [0, {REQUIRED_OPTIONS})")
        elif candidate.correct_index >= len(options):
            reasons.append(f"correctIndex {candidate.correct_index} does not point at an option")

        return reasons

    def _answer_reasons(self, answer: str, label: str) -> list[str]:
        answer = answer.strip()
        if not answer:
            return [f"{label} is empty"]
        if len(answer) < self.min_answer_chars:
            return [f"{label} is shorter than {self.min_answer_chars} characters"]
        return []
