"""
Test suite for StudySetService.

Tests per-chunk skipping, source filtering, progress reporting,
cancellation and query-driven study sets.

System role: Verification of batch study-set generation
"""

import asyncio
import json
import random

import pytest

from librarian.application.indexer import CorpusIndexer
from librarian.application.retrieval_service import HybridSearchService
from librarian.application.study_service import StudySetService
from librarian.core.generation.orchestrator import GenerationOrchestrator
from librarian.core.generation.retry import RetryController
from librarian.models.artifact import ArtifactKind, Flashcard, QuizQuestion
from librarian.models.retrieval import CorpusSnapshot


def build_service(handle, max_attempts: int = 1, search=None) -> StudySetService:
    controller = RetryController(
        GenerationOrchestrator(handle),
        max_attempts=max_attempts,
        rng=random.Random(0),
    )
    return StudySetService(controller, search_service=search)


class TestSelectChunks:
    """Test suite for chunk selection."""

    def test_should_filter_by_source_and_count(self, sample_chunks) -> None:
        """Test the source filter applies before the count."""
        selected = StudySetService.select_chunks(sample_chunks, count=1, sources=["biology.md", "history.md"])

        assert [chunk.id for chunk in selected] == ["cells"]

    def test_should_ignore_empty_source_filter(self, sample_chunks) -> None:
        """Test an empty source list selects everything."""
        assert len(StudySetService.select_chunks(sample_chunks, sources=[])) == 3


class TestStudySetService:
    """Test suite for StudySetService."""

    @pytest.mark.asyncio
    async def test_should_skip_failed_chunk_and_continue(self, make_handle, sample_chunks, quiz_json) -> None:
        """Test a chunk that exhausts its budget is skipped with a reason."""
        # Arrange
        handle, _ = make_handle(["no json here", quiz_json])
        service = build_service(handle)

        # Act
        result = await service.generate_study_set(sample_chunks, ArtifactKind.QUIZ)

        # Assert
        assert [artifact.chunk_id for artifact in result.artifacts] == ["cells", "rome"]
        assert all(isinstance(artifact, QuizQuestion) for artifact in result.artifacts)
        assert [item.chunk_id for item in result.skipped] == ["newton"]
        assert "after 1 attempts" in result.skipped[0].reason
        assert result.requested == 3
        assert result.attempts == 3

    @pytest.mark.asyncio
    async def test_should_skip_chunk_on_capability_failure(self, make_handle, sample_chunks, quiz_json) -> None:
        """Test a generator crash is reported for that chunk only."""
        handle, _ = make_handle([RuntimeError("model crashed"), quiz_json])

        result = await build_service(handle, max_attempts=3).generate_study_set(sample_chunks, ArtifactKind.QUIZ)

        assert len(result.artifacts) == 2
        assert "model crashed" in result.skipped[0].reason

    @pytest.mark.asyncio
    async def test_should_report_progress(self, make_handle, sample_chunks, valid_flashcard) -> None:
        """Test progress is reported per chunk and once at the end."""
        # Arrange
        handle, _ = make_handle([json.dumps(valid_flashcard)])
        calls = []

        # Act
        result = await build_service(handle).generate_study_set(
            sample_chunks,
            ArtifactKind.FLASHCARD,
            progress=lambda current, total, stage: calls.append((current, total, stage)),
        )

        # Assert
        assert calls == [
            (1, 3, "generating"),
            (2, 3, "generating"),
            (3, 3, "generating"),
            (3, 3, "complete"),
        ]
        assert all(isinstance(artifact, Flashcard) for artifact in result.artifacts)

    @pytest.mark.asyncio
    async def test_should_accept_snapshot_and_source_filter(self, make_handle, sample_chunks, quiz_json) -> None:
        """Test a snapshot can be passed directly and filtered by source."""
        handle, generator = make_handle([quiz_json])

        result = await build_service(handle).generate_study_set(
            CorpusSnapshot.from_chunks(sample_chunks),
            ArtifactKind.QUIZ,
            sources=["biology.md"],
        )

        assert [artifact.chunk_id for artifact in result.artifacts] == ["cells"]
        assert generator.calls == 1

    @pytest.mark.asyncio
    async def test_should_skip_everything_when_cancelled(self, make_handle, sample_chunks, quiz_json) -> None:
        """Test a set cancel event skips all remaining chunks without generating."""
        handle, generator = make_handle([quiz_json])
        cancel = asyncio.Event()
        cancel.set()

        result = await build_service(handle).generate_study_set(sample_chunks, ArtifactKind.QUIZ, cancel_event=cancel)

        assert result.artifacts == []
        assert [item.reason for item in result.skipped] == ["Generation cancelled"] * 3
        assert generator.calls == 0

    @pytest.mark.asyncio
    async def test_should_generate_from_search_results(self, make_handle, sample_chunks, quiz_json) -> None:
        """Test query-driven sets generate from the top search hits."""
        # Arrange
        handle, _ = make_handle([quiz_json])
        report = await CorpusIndexer(handle).build(sample_chunks)
        search = HybridSearchService(handle, snapshot=report.snapshot)
        service = build_service(handle, search=search)

        # Act
        result = await service.generate_for_query("Newton's first law", ArtifactKind.QUIZ, top_k=1)

        # Assert
        assert [artifact.chunk_id for artifact in result.artifacts] == ["newton"]

    @pytest.mark.asyncio
    async def test_should_require_search_service_for_queries(self, make_handle) -> None:
        """Test query-driven sets fail fast without a search service."""
        handle, _ = make_handle([""])

        with pytest.raises(RuntimeError):
            await build_service(handle).generate_for_query("anything", ArtifactKind.QUIZ)
