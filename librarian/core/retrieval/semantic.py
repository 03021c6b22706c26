"""
Dense semantic scorer.

Cosine similarity between unit-length vectors reduces to a dot product.
Inputs are not normalized here: callers (the embedding capability) must
supply L2-normalized vectors, otherwise scores are silently distorted.

Dependencies: math (stdlib)
System role: Semantic relevance signal for hybrid retrieval
"""

import logging
import math
from typing import Mapping, Sequence

from librarian.models.chunk import Chunk
from librarian.models.retrieval import ScoredChunk

logger = logging.getLogger(__name__)


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    """Dot product of two equal-length vectors."""
    if len(a) != len(b):
        raise ValueError(f"Vector length mismatch: {len(a)} != {len(b)}")
    return math.fsum(x * y for x, y in zip(a, b))


def l2_normalize(vector: Sequence[float]) -> list[float]:
    """
    Scale a vector to unit length.

    Raises:
        ValueError: When the vector has zero norm
    """
    norm = math.sqrt(math.fsum(x * x for x in vector))
    if norm == 0:
        raise ValueError("Cannot normalize a zero vector")
    return [x / norm for x in vector]


def semantic_score(
    query_vec: Sequence[float],
    corpus: Sequence[Chunk],
    chunk_vecs: Mapping[str, Sequence[float]],
) -> list[ScoredChunk]:
    """
    Score chunks by cosine similarity to the query vector.

    Chunks without an embedding are left out; fusion treats them as 0.

    Args:
        query_vec: Unit-length query embedding
        corpus: Chunks in corpus order
        chunk_vecs: Chunk id -> unit-length embedding

    Returns:
        list[ScoredChunk]: By score descending; ties keep corpus order
    """
    scored = []
    for chunk in corpus:
        vector = chunk_vecs.get(chunk.id)
        if vector is None:
            continue
        if len(vector) != len(query_vec):
            logger.warning(
                f"{__name__}:semantic_score - Skipping chunk {chunk.id}: "
                f"dimension {len(vector)} != query dimension {len(query_vec)}"
            )
            continue
        scored.append(ScoredChunk(chunk=chunk, score=dot(query_vec, vector)))

    return sorted(scored, key=lambda item: item.score, reverse=True)
