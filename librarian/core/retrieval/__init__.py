"""
Retrieval scoring.

Pure, synchronous scoring functions: tokenization, BM25, dense cosine
similarity and linear score fusion.
"""

from librarian.core.retrieval.bm25 import BM25Scorer, bm25_score
from librarian.core.retrieval.fusion import fuse
from librarian.core.retrieval.semantic import dot, l2_normalize, semantic_score
from librarian.core.retrieval.tokenizer import tokenize

__all__ = [
    "BM25Scorer",
    "bm25_score",
    "fuse",
    "dot",
    "l2_normalize",
    "semantic_score",
    "tokenize",
]
