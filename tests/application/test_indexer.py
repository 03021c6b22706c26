"""
Test suite for CorpusIndexer.

Tests snapshot construction, skipped chunks on capability failures and
dimension mismatches, progress reporting and serialized model access.

System role: Verification of corpus indexing
"""

import pytest

from librarian.application.indexer import CorpusIndexer
from librarian.boundary.model_handle import ExclusiveModelHandle


class FlakyEmbedder:
    """Embedder that fails or changes dimension for chosen texts."""

    def __init__(self, fail_on: str = "", short_on: str = "") -> None:
        self.fail_on = fail_on
        self.short_on = short_on

    async def embed(self, text: str) -> list[float]:
        if self.fail_on and self.fail_on in text:
            raise RuntimeError("embedding backend unavailable")
        if self.short_on and self.short_on in text:
            return [1.0, 0.0]
        return [0.0, 0.6, 0.8]


class TestCorpusIndexer:
    """Test suite for CorpusIndexer."""

    @pytest.mark.asyncio
    async def test_should_embed_every_chunk(self, make_handle, sample_chunks) -> None:
        """Test a clean run embeds all chunks in corpus order."""
        # Arrange
        handle, _ = make_handle([""])
        progress = []

        # Act
        report = await CorpusIndexer(handle, concurrency=3).build(
            sample_chunks, progress=lambda done, total: progress.append((done, total))
        )

        # Assert
        assert report.embedded == 3
        assert report.skipped == {}
        assert [chunk.id for chunk in report.snapshot.chunks] == ["newton", "cells", "rome"]
        assert progress[-1] == (3, 3)
        assert handle.max_observed_concurrency == 1

    @pytest.mark.asyncio
    async def test_should_skip_failed_embeddings(self, sample_chunks, scripted_generator) -> None:
        """Test a failing chunk is skipped and the rest are indexed."""
        handle = ExclusiveModelHandle(FlakyEmbedder(fail_on="Mitochondria"), scripted_generator([""]))

        report = await CorpusIndexer(handle).build(sample_chunks)

        assert set(report.skipped) == {"cells"}
        assert "cells" not in report.snapshot.embeddings
        assert len(report.snapshot) == 3

    @pytest.mark.asyncio
    async def test_should_skip_dimension_mismatch(self, sample_chunks, scripted_generator) -> None:
        """Test a vector with a different dimension from the first is rejected."""
        handle = ExclusiveModelHandle(FlakyEmbedder(short_on="Roman"), scripted_generator([""]))

        report = await CorpusIndexer(handle).build(sample_chunks)

        assert list(report.skipped) == ["rome"]
        assert "dimension" in report.skipped["rome"]

    def test_should_reject_invalid_concurrency(self, make_handle) -> None:
        """Test concurrency must be positive."""
        handle, _ = make_handle([""])

        with pytest.raises(ValueError):
            CorpusIndexer(handle, concurrency=0)
