"""
Corpus indexer.

Embeds every chunk of a corpus through the shared model handle with a
bounded number of requests outstanding, and packages the result as an
immutable CorpusSnapshot. A chunk whose embedding fails (or comes back with
the wrong dimension) is reported as skipped; the rest of the corpus is still
indexed.

Dependencies: asyncio, librarian.boundary.model_handle
System role: Chunk set -> indexed corpus snapshot
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from librarian.boundary.model_handle import ExclusiveModelHandle
from librarian.core.exceptions import CapabilityFailure, EmbeddingDimensionError
from librarian.models.chunk import Chunk
from librarian.models.retrieval import CorpusSnapshot
from librarian.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


@dataclass
class IndexReport:
    """Result of one indexing pass."""

    snapshot: CorpusSnapshot
    skipped: dict[str, str] = field(default_factory=dict)

    @property
    def embedded(self) -> int:
        return len(self.snapshot.embeddings)


class CorpusIndexer:
    """Builds corpus snapshots with bounded embedding concurrency."""

    def __init__(self, model_handle: ExclusiveModelHandle, concurrency: int = 1) -> None:
        """
        Initialize indexer.

        Args:
            model_handle: Serialized access to the embedder
            concurrency: Maximum embedding requests outstanding at once
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.model_handle = model_handle
        self.concurrency = concurrency

    async def build(
        self,
        chunks: Sequence[Chunk],
        progress: Callable[[int, int], None] | None = None,
    ) -> IndexReport:
        """
        Embed chunks and build a snapshot.

        Args:
            chunks: Corpus in order (ids must be unique)
            progress: Called with (done, total) after each chunk

        Returns:
            IndexReport: Snapshot plus chunk id -> reason for skipped chunks

        Raises:
            CorpusError: When chunk ids are not unique
        """
        semaphore = asyncio.Semaphore(self.concurrency)
        total = len(chunks)
        done = 0

        async def embed_one(chunk: Chunk) -> list[float] | CapabilityFailure:
            nonlocal done
            async with semaphore:
                try:
                    return await self.model_handle.embed(chunk.text)
                except CapabilityFailure as e:
                    return e
                finally:
                    done += 1
                    if progress is not None:
                        progress(done, total)

        results = await asyncio.gather(*(embed_one(chunk) for chunk in chunks))

        embeddings: dict[str, list[float]] = {}
        skipped: dict[str, str] = {}
        dimension: int | None = None

        for chunk, result in zip(chunks, results):
            if isinstance(result, CapabilityFailure):
                skipped[chunk.id] = result.message
                log_exception_with_context(
                    logger,
                    f"{__name__}:build - Embedding failed",
                    result,
                    chunk_id=chunk.id,
                    source=chunk.source,
                )
                continue

            if dimension is None:
                dimension = len(result)
            if len(result) != dimension:
                error = EmbeddingDimensionError(expected=dimension, actual=len(result))
                skipped[chunk.id] = str(error)
                logger.warning(f"{__name__}:build - Chunk {chunk.id}: {error}")
                continue

            embeddings[chunk.id] = result

        snapshot = CorpusSnapshot.from_chunks(chunks, embeddings)
        logger.info(
            f"{__name__}:build - Indexed {len(embeddings)}/{total} chunks "
            f"({len(skipped)} skipped)"
        )
        return IndexReport(snapshot=snapshot, skipped=skipped)
