"""
Retrieval result models.

ScoredChunk and FusedResult are produced fresh for every query. The
CorpusSnapshot bundles an indexed chunk set with its embeddings and is
never mutated once built; re-indexing produces a new snapshot.

Dependencies: pydantic, dataclasses
System role: Type definitions for ranking and corpus state
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field

from librarian.core.exceptions import CorpusError
from librarian.models.chunk import Chunk


class ScoredChunk(BaseModel):
    """One chunk scored by a single signal."""

    model_config = ConfigDict(frozen=True)

    chunk: Chunk
    score: float


class FusedResult(BaseModel):
    """One chunk with both normalized signals and their blend."""

    model_config = ConfigDict(frozen=True)

    chunk: Chunk
    bm25_norm: float = Field(ge=0.0, le=1.0)
    emb_norm: float = Field(ge=0.0, le=1.0)
    hybrid: float


@dataclass(frozen=True)
class CorpusSnapshot:
    """
    Read-only indexed corpus.

    Attributes:
        chunks: Chunks in corpus order
        embeddings: Chunk id -> unit-length embedding (chunks that failed to
            embed are absent)
    """

    chunks: tuple[Chunk, ...] = ()
    embeddings: Mapping[str, tuple[float, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        duplicates = []
        for chunk in self.chunks:
            if chunk.id in seen:
                duplicates.append(chunk.id)
            seen.add(chunk.id)
        if duplicates:
            raise CorpusError("Duplicate chunk ids in corpus", {"chunk_ids": duplicates})

        unknown = [chunk_id for chunk_id in self.embeddings if chunk_id not in seen]
        if unknown:
            raise CorpusError("Embeddings reference unknown chunks", {"chunk_ids": unknown})

        frozen = {key: tuple(vector) for key, vector in self.embeddings.items()}
        object.__setattr__(self, "chunks", tuple(self.chunks))
        object.__setattr__(self, "embeddings", MappingProxyType(frozen))

    @classmethod
    def from_chunks(
        cls,
        chunks: Sequence[Chunk],
        embeddings: Mapping[str, Sequence[float]] | None = None,
    ) -> "CorpusSnapshot":
        """Build a snapshot from any chunk sequence and embedding mapping."""
        return cls(
            chunks=tuple(chunks),
            embeddings={key: tuple(vec) for key, vec in (embeddings or {}).items()},
        )

    def __len__(self) -> int:
        return len(self.chunks)

    def get(self, chunk_id: str) -> Chunk | None:
        for chunk in self.chunks:
            if chunk.id == chunk_id:
                return chunk
        return None

    @property
    def sources(self) -> list[str]:
        """Distinct source names, sorted."""
        return sorted({chunk.source for chunk in self.chunks})
