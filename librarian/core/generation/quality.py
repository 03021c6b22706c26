"""
Candidate quality scoring.

Heuristics for choosing among several valid candidates for the same chunk
(best-of-N). The self-containment score penalizes questions that only make
sense next to the source ("according to the text", "the author", a leading
pronoun).

Dependencies: statistics
System role: Deterministic candidate ranking
"""

import re
import statistics
from typing import Sequence

from librarian.models.artifact import Candidate, QuizCandidate

VAGUE_REFERENCES = (
    "the text",
    "this text",
    "the passage",
    "this passage",
    "the article",
    "the document",
    "the reading",
    "according to the text",
    "based on the text",
    "in the text",
    "the text suggests",
    "the text states",
    "the text mentions",
    "as mentioned",
    "mentioned above",
    "the above",
    "the author",
    "the writer",
    "the speaker",
    "the narrator",
    "in the reading",
    "from the reading",
    "the source",
    "which of the following",
    "best describes",
    "best captures",
)

LEADING_PRONOUNS = ("he ", "she ", "they ", "it ", "this ", "that ", "these ", "those ")

MAX_SELF_CONTAINMENT = 5

_WORD_PATTERN = re.compile(r"[^\W_]+")
_CAPITALIZED_WORD = re.compile(r"\b[A-Z][a-z]")


def self_containment_score(question: str) -> int:
    """
    Score how understandable a question is without its source (0..5).

    Each vague reference and a leading pronoun cost 2 points; a question
    with no capitalized word after the first costs 1, as does one longer
    than 300 characters.
    """
    lowered = question.lower()
    score = MAX_SELF_CONTAINMENT

    score -= 2 * sum(1 for phrase in VAGUE_REFERENCES if phrase in lowered)

    if lowered.startswith(LEADING_PRONOUNS):
        score -= 2

    # First word is capitalized by grammar alone
    if not _CAPITALIZED_WORD.search(question[1:]):
        score -= 1

    if len(question) > 300:
        score -= 1

    return max(score, 0)


def score_candidate(candidate: Candidate, chunk_text: str = "") -> int:
    """
    Score a candidate; higher is better.

    Args:
        candidate: Valid candidate
        chunk_text: Text of the chunk it was generated from

    Returns:
        int: Quality score
    """
    question = candidate.question
    score = 0

    if 30 <= len(question) <= 150:
        score += 2
    elif 20 <= len(question) <= 200:
        score += 1

    score += 2 * self_containment_score(question)

    if isinstance(candidate, QuizCandidate):
        lengths = [len(option) for option in candidate.options]
        variance = statistics.pvariance(lengths) if lengths else 0.0
        if variance < 100:
            score += 2
        elif variance < 400:
            score += 1

        if candidate.explanation and len(candidate.explanation) >= 20:
            score += 1

    if chunk_text:
        chunk_words = {word for word in _WORD_PATTERN.findall(chunk_text.lower()) if len(word) > 5}
        question_words = set(_WORD_PATTERN.findall(question.lower()))
        score += min(len(chunk_words & question_words), 3)

    return score


def select_best(candidates: Sequence[Candidate], chunk_text: str = "") -> Candidate:
    """
    Pick the highest-scoring candidate.

    Ties go to the earliest candidate, so identical candidate sets always
    yield the same choice.

    Raises:
        ValueError: When no candidates are given
    """
    if not candidates:
        raise ValueError("No candidates to select from")

    best_index = 0
    best_score = score_candidate(candidates[0], chunk_text)
    for index in range(1, len(candidates)):
        score = score_candidate(candidates[index], chunk_text)
        if score > best_score:
            best_index, best_score = index, score
    return candidates[best_index]
