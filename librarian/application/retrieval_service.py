"""
Hybrid search service.

Answers queries against the active corpus snapshot by running BM25 (in a
worker thread) and the query embedding concurrently, then fusing the two
rankings. Re-indexing swaps in a whole new snapshot; each query reads the
snapshot reference exactly once, so in-flight queries keep scoring against
the corpus they started with.

Dependencies: asyncio, librarian.core.retrieval
System role: Query-time retrieval orchestration
"""

import asyncio
import logging

from librarian.boundary.model_handle import ExclusiveModelHandle
from librarian.configs.retrieval import RetrievalSettings
from librarian.core.retrieval.bm25 import BM25Scorer
from librarian.core.retrieval.fusion import fuse
from librarian.core.retrieval.semantic import semantic_score
from librarian.models.retrieval import CorpusSnapshot, FusedResult

logger = logging.getLogger(__name__)


class HybridSearchService:
    """
    Hybrid BM25 + semantic search over an immutable corpus snapshot.

    The BM25 scorer is built once per snapshot and swapped together with it.
    """

    def __init__(
        self,
        model_handle: ExclusiveModelHandle,
        settings: RetrievalSettings | None = None,
        snapshot: CorpusSnapshot | None = None,
    ) -> None:
        """
        Initialize search service.

        Args:
            model_handle: Serialized access to the embedder
            settings: Retrieval parameters (alpha, BM25 k1/b, top_k)
            snapshot: Initial corpus (empty when omitted)
        """
        self.model_handle = model_handle
        self.settings = settings or RetrievalSettings()
        self._active: tuple[CorpusSnapshot, BM25Scorer] = self._prepare(snapshot or CorpusSnapshot())

    def _prepare(self, snapshot: CorpusSnapshot) -> tuple[CorpusSnapshot, BM25Scorer]:
        scorer = BM25Scorer(snapshot.chunks, k1=self.settings.bm25_k1, b=self.settings.bm25_b)
        return snapshot, scorer

    @property
    def snapshot(self) -> CorpusSnapshot:
        return self._active[0]

    def replace_corpus(self, snapshot: CorpusSnapshot) -> None:
        """
        Atomically replace the active corpus.

        The scorer for the new snapshot is built before the swap; the swap
        itself is a single reference assignment.
        """
        prepared = self._prepare(snapshot)
        self._active = prepared
        logger.info(f"{__name__}:replace_corpus - Active corpus now has {len(snapshot)} chunks")

    async def search(
        self,
        query: str,
        top_k: int | None = None,
        alpha: float | None = None,
    ) -> list[FusedResult]:
        """
        Rank chunks against a query.

        Flow:
        1. Read the active snapshot once
        2. Run BM25 scoring and query embedding concurrently
        3. Score chunk embeddings against the query vector
        4. Fuse both signals and cut to top_k

        Args:
            query: Free-text query
            top_k: Maximum results (settings default when omitted; 0 or
                negative returns every chunk)
            alpha: Lexical weight override

        Returns:
            list[FusedResult]: Best results first

        Raises:
            CapabilityFailure: When the query cannot be embedded
        """
        snapshot, scorer = self._active
        if not snapshot.chunks:
            return []

        top_k = self.settings.top_k if top_k is None else top_k
        alpha = self.settings.alpha if alpha is None else alpha

        bm25, query_vec = await asyncio.gather(
            asyncio.to_thread(scorer.score, query),
            self.model_handle.embed(query),
        )
        emb = semantic_score(query_vec, snapshot.chunks, snapshot.embeddings)

        fused = fuse(bm25, emb, alpha=alpha, floor=self.settings.normalization_floor)
        results = fused[:top_k] if top_k > 0 else fused
        logger.debug(
            f"{__name__}:search - {len(results)} results for query ({len(query)} chars) "
            f"over {len(snapshot)} chunks"
        )
        return results
