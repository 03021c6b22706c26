"""
Test suite for candidate parsing and artifact construction.

Tests schema failures, option label cleanup, array payloads and option
shuffling with correct-index remapping.

System role: Verification of JSON payload -> candidate -> artifact
"""

import random

import pytest

from librarian.core.exceptions import SchemaFailure
from librarian.core.generation.parsing import (
    clean_option_label,
    parse_candidate,
    shuffle_options,
    to_artifact,
)
from librarian.models.artifact import (
    DEFAULT_EXPLANATION,
    ArtifactKind,
    FlashcardCandidate,
    OpenEndedQuestion,
    QuizCandidate,
    QuizQuestion,
)


class TestCleanOptionLabel:
    """Test suite for option label stripping."""

    @pytest.mark.parametrize(
        "option,expected",
        [
            ("A) Paris", "Paris"),
            ("b. Berlin", "Berlin"),
            ("C: Rome", "Rome"),
            ("(D) Madrid", "Madrid"),
            ("A ) Lisbon", "Lisbon"),
            ("  Vienna  ", "Vienna"),
            ("Athens", "Athens"),
        ],
    )
    def test_should_strip_leading_labels(self, option: str, expected: str) -> None:
        """Test common option label formats are removed."""
        assert clean_option_label(option) == expected


class TestParseCandidate:
    """Test suite for parse_candidate."""

    def test_should_parse_quiz_payload(self, valid_quiz: dict) -> None:
        """Test a well-formed quiz payload becomes a QuizCandidate."""
        candidate = parse_candidate(valid_quiz, ArtifactKind.QUIZ)

        assert isinstance(candidate, QuizCandidate)
        assert candidate.correct_index == 0
        assert len(candidate.options) == 4

    def test_should_clean_labels_in_quiz_options(self, valid_quiz: dict) -> None:
        """Test option labels are stripped during parsing."""
        valid_quiz["options"] = ["A) One thing", "B) Two things", "C) Three things", "D) Four things"]

        candidate = parse_candidate(valid_quiz, ArtifactKind.QUIZ)

        assert candidate.options == ["One thing", "Two things", "Three things", "Four things"]

    def test_should_keep_wrong_option_count_for_validator(self, valid_quiz: dict) -> None:
        """Test schema parsing does not enforce content rules like option count."""
        valid_quiz["options"] = valid_quiz["options"][:3]

        candidate = parse_candidate(valid_quiz, ArtifactKind.QUIZ)

        assert len(candidate.options) == 3

    def test_should_raise_schema_failure_for_missing_field(self, valid_quiz: dict) -> None:
        """Test a missing correctIndex is a schema failure listing the field."""
        del valid_quiz["correctIndex"]

        with pytest.raises(SchemaFailure) as exc_info:
            parse_candidate(valid_quiz, ArtifactKind.QUIZ)

        assert any("correctIndex" in reason for reason in exc_info.value.reasons)

    def test_should_raise_schema_failure_for_wrong_type(self, valid_quiz: dict) -> None:
        """Test mistyped fields are schema failures."""
        valid_quiz["options"] = "not a list"

        with pytest.raises(SchemaFailure):
            parse_candidate(valid_quiz, ArtifactKind.QUIZ)

    def test_should_use_first_object_of_array(self, valid_flashcard: dict) -> None:
        """Test array payloads resolve to their first object."""
        candidate = parse_candidate([valid_flashcard, {"question": "x", "answer": "y"}], ArtifactKind.FLASHCARD)

        assert isinstance(candidate, FlashcardCandidate)
        assert candidate.question == valid_flashcard["question"]

    @pytest.mark.parametrize("payload", [[], [1, 2], "text", 42])
    def test_should_reject_non_object_payloads(self, payload) -> None:
        """Test payloads without an object are schema failures."""
        with pytest.raises(SchemaFailure):
            parse_candidate(payload, ArtifactKind.FLASHCARD)

    def test_should_parse_open_ended_with_default_key_points(self) -> None:
        """Test keyPoints is optional for open-ended questions."""
        candidate = parse_candidate(
            {"question": "Explain inertia.", "idealAnswer": "Inertia is resistance to changes in motion."},
            ArtifactKind.OPEN_ENDED,
        )

        assert candidate.key_points == []


class TestShuffleOptions:
    """Test suite for option shuffling."""

    def test_should_remap_correct_index(self) -> None:
        """Test the correct index follows its option through the shuffle."""
        options = ["right", "wrong1", "wrong2", "wrong3"]

        for seed in range(20):
            shuffled, index = shuffle_options(options, 0, random.Random(seed))

            assert shuffled[index] == "right"
            assert sorted(shuffled) == sorted(options)

    def test_should_be_reproducible_with_seed(self) -> None:
        """Test the same seed gives the same order."""
        options = ["a1", "b2", "c3", "d4"]

        assert shuffle_options(options, 2, random.Random(7)) == shuffle_options(options, 2, random.Random(7))


class TestToArtifact:
    """Test suite for accepted artifact construction."""

    def test_should_build_quiz_question_with_default_explanation(self, valid_quiz: dict, newton_chunk) -> None:
        """Test a missing explanation falls back to the default text."""
        valid_quiz.pop("explanation")
        candidate = parse_candidate(valid_quiz, ArtifactKind.QUIZ)

        artifact = to_artifact(candidate, newton_chunk, rng=random.Random(1))

        assert isinstance(artifact, QuizQuestion)
        assert artifact.explanation == DEFAULT_EXPLANATION
        assert artifact.correct_option == valid_quiz["options"][0]
        assert artifact.chunk_id == newton_chunk.id

    def test_should_keep_order_without_shuffle(self, valid_quiz: dict, newton_chunk) -> None:
        """Test shuffle=False leaves options untouched."""
        candidate = parse_candidate(valid_quiz, ArtifactKind.QUIZ)

        artifact = to_artifact(candidate, newton_chunk, shuffle=False)

        assert artifact.options == valid_quiz["options"]
        assert artifact.correct_index == 0

    def test_should_attach_context_to_open_ended(self, valid_open_ended: dict, newton_chunk) -> None:
        """Test open-ended questions keep the source context."""
        candidate = parse_candidate(valid_open_ended, ArtifactKind.OPEN_ENDED)

        artifact = to_artifact(candidate, newton_chunk)

        assert isinstance(artifact, OpenEndedQuestion)
        assert artifact.context == newton_chunk.text
        assert artifact.key_points == ("inertia", "net force")
