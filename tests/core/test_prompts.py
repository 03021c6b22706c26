"""
Test suite for generation task templates.

Tests template structure, rendering of chunk context, truncation,
corrective feedback and per-task sampling parameters.

System role: Verification of prompt construction
"""

from librarian.configs.generation import GenerationSettings
from librarian.core.generation.examples import format_examples
from librarian.core.generation.prompts import QUIZ_PROMPT, build_task_template, format_feedback
from librarian.models.artifact import ArtifactKind, Difficulty
from librarian.models.chunk import Chunk


class TestQuizPromptTemplate:
    """Test suite for the quiz chat template."""

    def test_prompt_should_have_system_and_human_messages(self) -> None:
        """Test QUIZ_PROMPT has a system and a human message."""
        assert len(QUIZ_PROMPT.messages) == 2
        assert set(QUIZ_PROMPT.input_variables) == {
            "examples",
            "guidance",
            "source",
            "section",
            "context",
            "feedback",
            "output_format",
        }


class TestTaskTemplateRender:
    """Test suite for TaskTemplate.render."""

    def test_should_include_source_and_context(self, newton_chunk: Chunk) -> None:
        """Test rendered user message carries the chunk text and source."""
        task = build_task_template(ArtifactKind.QUIZ, Difficulty.EASY)

        prompt = task.render(newton_chunk, max_chars=800)

        assert newton_chunk.text in prompt.user
        assert '"physics.md"' in prompt.user
        assert "CRITICAL RULES" in prompt.system
        assert "GOLD-STANDARD EXAMPLES" in prompt.system
        assert '"correctIndex"' in prompt.user

    def test_should_truncate_context(self, chunk_factory) -> None:
        """Test chunk text is cut to the character budget."""
        chunk = chunk_factory("x" * 50 + " " + "y" * 50)
        task = build_task_template(ArtifactKind.FLASHCARD)

        prompt = task.render(chunk, max_chars=40)

        assert "x" * 40 in prompt.user
        assert "x" * 41 not in prompt.user
        assert "x" * 40 + "\n" in prompt.user

    def test_should_mention_section_when_present(self, chunk_factory) -> None:
        """Test section labels appear in the prompt."""
        chunk = chunk_factory("Energy is conserved in isolated systems.", section="Thermodynamics")

        prompt = build_task_template(ArtifactKind.OPEN_ENDED).render(chunk, max_chars=800)

        assert "(section: Thermodynamics)" in prompt.user

    def test_should_append_feedback(self, newton_chunk: Chunk) -> None:
        """Test failure reasons are appended as corrective feedback."""
        task = build_task_template(ArtifactKind.QUIZ)

        prompt = task.render(newton_chunk, max_chars=800, feedback=["Expected exactly 4 options, got 3"])

        assert "rejected for these reasons" in prompt.user
        assert "- Expected exactly 4 options, got 3" in prompt.user

    def test_should_keep_braces_in_chunk_text(self, chunk_factory) -> None:
        """Test chunk text with braces renders verbatim."""
        chunk = chunk_factory("The set {1, 2, 3} has three elements.")

        prompt = build_task_template(ArtifactKind.FLASHCARD).render(chunk, max_chars=800)

        assert "{1, 2, 3}" in prompt.user


class TestBuildTaskTemplate:
    """Test suite for build_task_template."""

    def test_should_use_per_task_sampling_params(self) -> None:
        """Test each kind takes its own max_tokens and temperature."""
        settings = GenerationSettings(quiz_max_tokens=300, flashcard_temperature=0.2)

        quiz = build_task_template(ArtifactKind.QUIZ, settings=settings)
        flashcard = build_task_template(ArtifactKind.FLASHCARD, settings=settings)
        open_ended = build_task_template(ArtifactKind.OPEN_ENDED, settings=settings)

        assert quiz.params.max_tokens == 300
        assert quiz.params.temperature == 0.8
        assert flashcard.params.temperature == 0.2
        assert open_ended.params.max_tokens == 1024

    def test_format_feedback_should_be_empty_without_reasons(self) -> None:
        """Test no feedback text is rendered when there are no reasons."""
        assert format_feedback(None) == ""
        assert format_feedback([]) == ""

    def test_format_examples_should_be_deterministic(self) -> None:
        """Test examples render in a fixed order without an RNG."""
        assert format_examples(Difficulty.HARD) == format_examples(Difficulty.HARD)
        assert "Example 3:" in format_examples(Difficulty.HARD)
        assert "Example 2:" not in format_examples(Difficulty.HARD, count=1)
