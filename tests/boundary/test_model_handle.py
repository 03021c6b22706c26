"""
Test suite for ExclusiveModelHandle.

Tests serialized access under concurrent callers and failure wrapping,
including streams that break part way.

System role: Verification of shared model access
"""

import asyncio

import pytest

from librarian.boundary.capabilities import GenerationParams, PromptMessages
from librarian.boundary.model_handle import ExclusiveModelHandle
from librarian.core.exceptions import CapabilityFailure

PROMPT = PromptMessages(system="You are terse.", user="Say hello.")


class BrokenStream:
    """Generator that yields a fragment and then fails."""

    async def stream(self, prompt, params):
        yield '{"question": "Half'
        raise ConnectionError("connection reset")


class SlowEmbedder:
    """Embedder that yields control mid-call."""

    async def embed(self, text: str) -> list[float]:
        await asyncio.sleep(0)
        return [1.0, 0.0]


class TestExclusiveModelHandle:
    """Test suite for ExclusiveModelHandle."""

    @pytest.mark.asyncio
    async def test_should_serialize_concurrent_calls(self, scripted_generator) -> None:
        """Test overlapping embed and generate calls never run together."""
        # Arrange
        handle = ExclusiveModelHandle(SlowEmbedder(), scripted_generator(["hello there"]))

        # Act
        results = await asyncio.gather(
            handle.embed("a"),
            handle.generate_text(PROMPT, GenerationParams()),
            handle.embed("b"),
            handle.generate_text(PROMPT, GenerationParams()),
        )

        # Assert
        assert results[1] == "hello there"
        assert handle.call_count == 4
        assert handle.max_observed_concurrency == 1

    @pytest.mark.asyncio
    async def test_should_discard_partial_stream_on_failure(self, embedder) -> None:
        """Test a mid-stream failure surfaces as CapabilityFailure."""
        handle = ExclusiveModelHandle(embedder, BrokenStream())

        with pytest.raises(CapabilityFailure) as exc_info:
            await handle.generate_text(PROMPT, GenerationParams())

        assert exc_info.value.details["capability"] == "generate"
        assert "connection reset" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_should_release_lock_after_failure(self, embedder) -> None:
        """Test the handle stays usable after a failed call."""
        handle = ExclusiveModelHandle(embedder, BrokenStream())

        with pytest.raises(CapabilityFailure):
            await handle.generate_text(PROMPT, GenerationParams())
        vector = await handle.embed("Newton first law")

        assert len(vector) == 10

    @pytest.mark.asyncio
    async def test_should_wrap_embedding_errors(self, scripted_generator) -> None:
        """Test embedder exceptions become CapabilityFailure."""

        class FailingEmbedder:
            async def embed(self, text: str) -> list[float]:
                raise TimeoutError("runtime timed out")

        handle = ExclusiveModelHandle(FailingEmbedder(), scripted_generator([""]))

        with pytest.raises(CapabilityFailure) as exc_info:
            await handle.embed("text")

        assert exc_info.value.details["capability"] == "embed"
