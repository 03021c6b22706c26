"""
Generation orchestrator.

One attempt of the generate -> extract -> parse -> validate pipeline for a
single chunk. Prompt construction (truncating the chunk to a character
budget) and JSON extraction live here; deciding whether to try again is the
RetryController's job.

Dependencies: librarian.boundary.model_handle
System role: Single-attempt artifact generation
"""

import logging

from librarian.boundary.capabilities import PromptMessages
from librarian.boundary.model_handle import ExclusiveModelHandle
from librarian.core.exceptions import ValidationFailure
from librarian.core.generation.extraction import extract_json
from librarian.core.generation.parsing import parse_candidate
from librarian.core.generation.prompts import TaskTemplate
from librarian.core.generation.validator import ArtifactValidator
from librarian.models.artifact import Candidate
from librarian.models.chunk import Chunk

logger = logging.getLogger(__name__)

DEFAULT_MAX_PROMPT_CHARS = 800


class GenerationOrchestrator:
    """Runs single generation attempts against the shared model handle."""

    def __init__(
        self,
        model_handle: ExclusiveModelHandle,
        validator: ArtifactValidator | None = None,
        max_prompt_chars: int = DEFAULT_MAX_PROMPT_CHARS,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            model_handle: Serialized access to the text generator
            validator: Content validator (default rules when omitted)
            max_prompt_chars: Maximum chunk characters placed in a prompt
        """
        self.model_handle = model_handle
        self.validator = validator or ArtifactValidator()
        self.max_prompt_chars = max_prompt_chars

    def build_prompt(
        self,
        chunk: Chunk,
        task: TaskTemplate,
        feedback: list[str] | None = None,
    ) -> PromptMessages:
        """Render the task prompt for a chunk, with optional corrective feedback."""
        return task.render(chunk, self.max_prompt_chars, feedback)

    async def generate(
        self,
        chunk: Chunk,
        task: TaskTemplate,
        feedback: list[str] | None = None,
    ) -> str:
        """
        Generate raw text for a chunk.

        Raises:
            CapabilityFailure: When the generator fails
        """
        prompt = self.build_prompt(chunk, task, feedback)
        return await self.model_handle.generate_text(prompt, task.params)

    async def produce_candidate(
        self,
        chunk: Chunk,
        task: TaskTemplate,
        feedback: list[str] | None = None,
    ) -> Candidate:
        """
        Run one full attempt and return a validated candidate.

        Args:
            chunk: Chunk to generate from
            task: Task template
            feedback: Failure reasons from the previous attempt

        Returns:
            Candidate: Candidate that passed validation

        Raises:
            ExtractionFailure: No JSON value in the output
            SchemaFailure: JSON does not match the task schema
            ValidationFailure: Candidate violates a content rule
            CapabilityFailure: Generator failed
        """
        raw = await self.generate(chunk, task, feedback)
        payload = extract_json(raw)
        candidate = parse_candidate(payload, task.kind)

        report = self.validator.validate(candidate, task.kind)
        if not report.passed:
            raise ValidationFailure(report)

        logger.debug(f"{__name__}:produce_candidate - Accepted {task.kind.value} for chunk {chunk.id}")
        return candidate
