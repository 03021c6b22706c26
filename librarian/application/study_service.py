"""
Study set service.

Generates a batch of study items (quiz questions, flashcards, open-ended
questions) from a corpus or from the results of a search. Each chunk goes
through the retry controller on its own; a chunk that cannot produce an
accepted artifact is reported as skipped with a reason and the batch carries
on.

Dependencies: librarian.core.generation, librarian.observability
System role: Batch study-set generation
"""

import asyncio
import logging
import random
from typing import Callable, Sequence

from pydantic import BaseModel, Field

from librarian.application.retrieval_service import HybridSearchService
from librarian.configs.generation import GenerationSettings
from librarian.core.exceptions import BudgetExhausted, CapabilityFailure, GenerationCancelled
from librarian.core.generation.prompts import build_task_template
from librarian.core.generation.retry import RetryController
from librarian.models.artifact import Artifact, ArtifactKind, Difficulty
from librarian.models.chunk import Chunk
from librarian.models.retrieval import CorpusSnapshot
from librarian.observability.correlation import clear_correlation_id, set_correlation_id
from librarian.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class SkippedItem(BaseModel):
    """Chunk for which no artifact was produced."""

    chunk_id: str
    source: str
    reason: str


class StudySetResult(BaseModel):
    """Accepted artifacts plus the chunks that were skipped."""

    artifacts: list[Artifact] = Field(default_factory=list)
    skipped: list[SkippedItem] = Field(default_factory=list)
    attempts: int = 0

    @property
    def requested(self) -> int:
        return len(self.artifacts) + len(self.skipped)


class StudySetService:
    """Batch generation of study items over chunks."""

    def __init__(
        self,
        retry_controller: RetryController,
        search_service: HybridSearchService | None = None,
        settings: GenerationSettings | None = None,
    ) -> None:
        """
        Initialize study set service.

        Args:
            retry_controller: Per-chunk generate/validate/retry loop
            search_service: Needed only for query-driven study sets
            settings: Generation settings for task sampling parameters
        """
        self.retry_controller = retry_controller
        self.search_service = search_service
        self.settings = settings or GenerationSettings()

    @staticmethod
    def select_chunks(
        chunks: Sequence[Chunk],
        count: int | None = None,
        sources: Sequence[str] | None = None,
        rng: random.Random | None = None,
    ) -> list[Chunk]:
        """
        Pick the chunks to generate from.

        Args:
            chunks: Candidate chunks
            count: Number to pick (all when omitted)
            sources: Restrict to these source names (ignored when empty)
            rng: Random selection when given; corpus order otherwise

        Returns:
            list[Chunk]: Selected chunks
        """
        selected = list(chunks)
        if sources:
            wanted = set(sources)
            selected = [chunk for chunk in selected if chunk.source in wanted]

        if rng is not None:
            rng.shuffle(selected)

        if count is not None:
            selected = selected[: max(count, 0)]
        return selected

    async def generate_study_set(
        self,
        chunks: Sequence[Chunk] | CorpusSnapshot,
        kind: ArtifactKind,
        difficulty: Difficulty = Difficulty.MEDIUM,
        count: int | None = None,
        sources: Sequence[str] | None = None,
        rng: random.Random | None = None,
        progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> StudySetResult:
        """
        Generate one study item per selected chunk.

        Flow:
        1. Filter chunks by source and select ``count`` of them
        2. Run the retry controller for each chunk in turn
        3. Record failures as skipped items without stopping the batch

        Args:
            chunks: Chunks or a corpus snapshot
            kind: Artifact kind
            difficulty: Difficulty level
            count: Number of items wanted (one per chunk)
            sources: Restrict to these source names
            rng: Random chunk selection
            progress: Called with (current, total, stage)
            cancel_event: Skips remaining chunks once set

        Returns:
            StudySetResult: Accepted artifacts and skipped chunks
        """
        if isinstance(chunks, CorpusSnapshot):
            chunks = chunks.chunks

        selected = self.select_chunks(chunks, count, sources, rng)
        task = build_task_template(kind, difficulty, self.settings)
        total = len(selected)
        result = StudySetResult()

        run_id = set_correlation_id()
        logger.info(
            f"{__name__}:generate_study_set - Run {run_id}: {total} {kind.value} "
            f"items at {difficulty.value} difficulty"
        )

        try:
            for index, chunk in enumerate(selected, start=1):
                if progress is not None:
                    progress(index, total, "generating")

                if cancel_event is not None and cancel_event.is_set():
                    result.skipped.append(
                        SkippedItem(chunk_id=chunk.id, source=chunk.source, reason="Generation cancelled")
                    )
                    continue

                try:
                    generated = await self.retry_controller.generate(chunk, task, cancel_event)
                except (BudgetExhausted, GenerationCancelled) as e:
                    result.attempts += e.attempts
                    result.skipped.append(SkippedItem(chunk_id=chunk.id, source=chunk.source, reason=e.message))
                    log_exception_with_context(
                        logger,
                        f"{__name__}:generate_study_set - Skipped chunk",
                        e,
                        chunk_id=chunk.id,
                    )
                    continue
                except CapabilityFailure as e:
                    result.attempts += 1
                    result.skipped.append(
                        SkippedItem(
                            chunk_id=chunk.id,
                            source=chunk.source,
                            reason=f"No {kind.value} generated for chunk {chunk.id}: {e.message}",
                        )
                    )
                    log_exception_with_context(
                        logger,
                        f"{__name__}:generate_study_set - Capability failure",
                        e,
                        chunk_id=chunk.id,
                    )
                    continue

                result.attempts += generated.attempts
                result.artifacts.append(generated.artifact)

            if progress is not None:
                progress(total, total, "complete")

            logger.info(
                f"{__name__}:generate_study_set - Run {run_id}: {len(result.artifacts)} accepted, "
                f"{len(result.skipped)} skipped, {result.attempts} attempts"
            )
            return result
        finally:
            clear_correlation_id()

    async def generate_for_query(
        self,
        query: str,
        kind: ArtifactKind,
        difficulty: Difficulty = Difficulty.MEDIUM,
        top_k: int | None = None,
        progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> StudySetResult:
        """
        Generate study items from the top search results for a query.

        Raises:
            RuntimeError: When the service has no search service
            CapabilityFailure: When the query cannot be embedded
        """
        if self.search_service is None:
            raise RuntimeError("Query-driven study sets require a search service")

        results = await self.search_service.search(query, top_k=top_k)
        chunks = [item.chunk for item in results]
        return await self.generate_study_set(
            chunks,
            kind,
            difficulty,
            progress=progress,
            cancel_event=cancel_event,
        )
