"""
Hybrid score fusion.

Each signal is divided by its own maximum for the current query (floored so
an all-zero signal does not blow up), then blended:

    hybrid = alpha * bm25Norm + (1 - alpha) * embNorm

Negative cosine scores are clamped to 0 so both normalized signals stay in
[0, 1]. A chunk missing from one ranking scores 0 for that signal.

Dependencies: None
System role: Rank fusion for hybrid retrieval
"""

from typing import Sequence

from librarian.models.chunk import Chunk
from librarian.models.retrieval import FusedResult, ScoredChunk

DEFAULT_ALPHA = 0.5
NORMALIZATION_FLOOR = 0.001


def _normalized(scores: Sequence[ScoredChunk], floor: float) -> dict[str, float]:
    clamped = {item.chunk.id: max(item.score, 0.0) for item in scores}
    top = max(clamped.values(), default=0.0)
    divisor = max(top, floor)
    return {chunk_id: min(score / divisor, 1.0) for chunk_id, score in clamped.items()}


def fuse(
    bm25: Sequence[ScoredChunk],
    emb: Sequence[ScoredChunk],
    alpha: float = DEFAULT_ALPHA,
    floor: float = NORMALIZATION_FLOOR,
) -> list[FusedResult]:
    """
    Blend lexical and semantic rankings into one list.

    Args:
        bm25: Lexical ranking
        emb: Semantic ranking
        alpha: Weight of the lexical signal, in [0, 1]
        floor: Minimum divisor used when normalizing a signal

    Returns:
        list[FusedResult]: One entry per distinct chunk, by hybrid score
        descending, ties broken by chunk id
    """
    if not 0.0 <= alpha <= 1.0:
        raise ValueError(f"alpha must be within [0, 1], got {alpha}")

    bm25_norm = _normalized(bm25, floor)
    emb_norm = _normalized(emb, floor)

    chunks: dict[str, Chunk] = {}
    for item in (*bm25, *emb):
        chunks.setdefault(item.chunk.id, item.chunk)

    results = []
    for chunk_id, chunk in chunks.items():
        lexical = bm25_norm.get(chunk_id, 0.0)
        semantic = emb_norm.get(chunk_id, 0.0)
        results.append(
            FusedResult(
                chunk=chunk,
                bm25_norm=lexical,
                emb_norm=semantic,
                hybrid=alpha * lexical + (1 - alpha) * semantic,
            )
        )

    results.sort(key=lambda item: (-item.hybrid, item.chunk.id))
    return results
