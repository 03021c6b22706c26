"""
BM25 lexical scorer.

Okapi BM25 with the "+1" idf variant:

    idf    = ln((N - df + 0.5) / (df + 0.5) + 1)
    tfNorm = tf * (k1 + 1) / (tf + k1 * (1 - b + b * docLen / avgDocLen))

Terms absent from the corpus have a large idf but tf = 0, so they add
nothing to any chunk's score.

Dependencies: math, collections (stdlib)
System role: Lexical relevance signal for hybrid retrieval
"""

import math
from collections import Counter
from typing import Sequence

from librarian.core.retrieval.tokenizer import tokenize
from librarian.models.chunk import Chunk
from librarian.models.retrieval import ScoredChunk

DEFAULT_K1 = 1.5
DEFAULT_B = 0.75


class BM25Scorer:
    """
    BM25 scorer over a fixed chunk corpus.

    Tokenization, document frequencies and average length are computed once
    at construction, so one scorer can answer many queries against the same
    immutable corpus.
    """

    def __init__(
        self,
        corpus: Sequence[Chunk],
        k1: float = DEFAULT_K1,
        b: float = DEFAULT_B,
    ) -> None:
        """
        Initialize scorer and precompute corpus statistics.

        Args:
            corpus: Chunks to score, in corpus order
            k1: Term-frequency saturation parameter
            b: Length normalization parameter (0 disables it)
        """
        self._corpus = tuple(corpus)
        self._k1 = k1
        self._b = b
        self._term_counts = [Counter(tokenize(chunk.text)) for chunk in self._corpus]
        self._doc_lengths = [sum(counts.values()) for counts in self._term_counts]

        self._avg_doc_len = (
            sum(self._doc_lengths) / len(self._corpus) if self._corpus else 0.0
        )

        self._df: Counter[str] = Counter()
        for counts in self._term_counts:
            self._df.update(counts.keys())

    @property
    def avg_doc_len(self) -> float:
        return self._avg_doc_len

    def document_frequency(self, term: str) -> int:
        return self._df.get(term, 0)

    def idf(self, term: str) -> float:
        n = len(self._corpus)
        df = self._df.get(term, 0)
        return math.log((n - df + 0.5) / (df + 0.5) + 1)

    def score(self, query: str) -> list[ScoredChunk]:
        """
        Score every chunk against a query.

        Args:
            query: Free-text query

        Returns:
            list[ScoredChunk]: One entry per chunk, by score descending; ties
            keep corpus order
        """
        if not self._corpus:
            return []

        query_terms = tokenize(query)
        k1, b = self._k1, self._b
        scored = []
        for chunk, counts, doc_len in zip(self._corpus, self._term_counts, self._doc_lengths):
            length_ratio = doc_len / self._avg_doc_len if self._avg_doc_len else 0.0
            total = 0.0
            for term in query_terms:
                tf = counts.get(term, 0)
                if tf == 0:
                    continue
                tf_norm = tf * (k1 + 1) / (tf + k1 * (1 - b + b * length_ratio))
                total += self.idf(term) * tf_norm
            scored.append(ScoredChunk(chunk=chunk, score=total))

        # sorted() is stable, so equal scores stay in corpus order
        return sorted(scored, key=lambda item: item.score, reverse=True)


def bm25_score(
    query: str,
    corpus: Sequence[Chunk],
    k1: float = DEFAULT_K1,
    b: float = DEFAULT_B,
) -> list[ScoredChunk]:
    """One-shot BM25 scoring of a query against a corpus."""
    return BM25Scorer(corpus, k1=k1, b=b).score(query)
