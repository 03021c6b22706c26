"""
Test suite for lexical and semantic scoring and score fusion.

Covers tokenization rules, BM25 ordering and zero-score behaviour, dot
product scoring over unit vectors, and max-normalized fusion.

System role: Verification of retrieval scoring primitives
"""

import math

import pytest

from librarian.core.retrieval.bm25 import BM25Scorer, bm25_score
from librarian.core.retrieval.fusion import fuse
from librarian.core.retrieval.semantic import dot, l2_normalize, semantic_score
from librarian.core.retrieval.tokenizer import tokenize
from librarian.models.retrieval import ScoredChunk


class TestTokenize:
    """Test suite for the shared tokenizer."""

    def test_should_lowercase_and_split_on_non_alphanumerics(self) -> None:
        """Test punctuation splits tokens and case is normalized."""
        assert tokenize("Newton's First-Law, restated!") == ["newton", "first", "law", "restated"]

    def test_should_drop_tokens_of_two_characters_or_less(self) -> None:
        """Test short tokens such as numbers and acronyms are excluded."""
        assert tokenize("AI in 49 BCE was big") == ["bce", "was", "big"]

    def test_should_return_empty_list_for_blank_text(self) -> None:
        """Test blank text yields no tokens."""
        assert tokenize("   ") == []


class TestBM25:
    """Test suite for BM25 scoring."""

    def test_should_return_empty_list_for_empty_corpus(self) -> None:
        """Test empty corpus yields no results."""
        assert bm25_score("newton", []) == []

    def test_should_order_by_non_increasing_score(self, sample_chunks) -> None:
        """Test results are sorted by score descending."""
        # Act
        results = bm25_score("newton law energy cell", sample_chunks)

        # Assert
        scores = [item.score for item in results]
        assert scores == sorted(scores, reverse=True)
        assert len(results) == len(sample_chunks)

    def test_should_score_zero_when_query_terms_absent(self, sample_chunks) -> None:
        """Test absent terms contribute exactly zero."""
        results = bm25_score("quantum chromodynamics", sample_chunks)

        assert all(item.score == 0.0 for item in results)

    def test_should_keep_corpus_order_on_ties(self, sample_chunks) -> None:
        """Test equal scores preserve corpus order (stable sort)."""
        results = bm25_score("zebra", sample_chunks)

        assert [item.chunk.id for item in results] == [chunk.id for chunk in sample_chunks]

    def test_should_score_matching_chunk_above_zero(self, newton_chunk) -> None:
        """Test the Newton chunk scores positively for its own terms."""
        results = bm25_score("Newton first law", [newton_chunk])

        assert results[0].score > 0

    def test_should_match_reference_formula(self, chunk_factory) -> None:
        """Test a hand-computed BM25 value."""
        # Arrange
        corpus = [
            chunk_factory("apple apple banana"),
            chunk_factory("banana cherry"),
        ]
        k1, b = 1.5, 0.75
        avg_len = (3 + 2) / 2
        idf = math.log((2 - 1 + 0.5) / (1 + 0.5) + 1)
        expected = idf * (2 * (k1 + 1)) / (2 + k1 * (1 - b + b * 3 / avg_len))

        # Act
        results = BM25Scorer(corpus, k1=k1, b=b).score("apple")

        # Assert
        assert results[0].chunk.id == corpus[0].id
        assert results[0].score == pytest.approx(expected)
        assert results[1].score == 0.0

    def test_should_count_document_frequency_once_per_chunk(self, chunk_factory) -> None:
        """Test repeated terms in one chunk count once toward df."""
        scorer = BM25Scorer([chunk_factory("rest rest rest"), chunk_factory("motion")])

        assert scorer.document_frequency("rest") == 1
        assert scorer.document_frequency("absent") == 0


class TestSemanticScore:
    """Test suite for dense scoring."""

    def test_dot_should_equal_cosine_for_unit_vectors(self) -> None:
        """Test dot product of unit vectors equals cosine similarity."""
        a = l2_normalize([3.0, 4.0])
        b = l2_normalize([4.0, 3.0])

        assert dot(a, b) == pytest.approx(24 / 25)

    def test_l2_normalize_should_reject_zero_vector(self) -> None:
        """Test zero vectors cannot be normalized."""
        with pytest.raises(ValueError):
            l2_normalize([0.0, 0.0])

    def test_should_omit_chunks_without_vectors(self, sample_chunks) -> None:
        """Test chunks missing from the embedding map are left out."""
        # Arrange
        vectors = {"newton": [1.0, 0.0], "cells": [0.0, 1.0]}

        # Act
        results = semantic_score([1.0, 0.0], sample_chunks, vectors)

        # Assert
        assert [item.chunk.id for item in results] == ["newton", "cells"]
        assert results[0].score == pytest.approx(1.0)

    def test_should_skip_vectors_with_wrong_dimension(self, sample_chunks) -> None:
        """Test mismatched dimensions are skipped rather than raising."""
        vectors = {"newton": [1.0, 0.0, 0.0], "cells": [0.0, 1.0]}

        results = semantic_score([0.0, 1.0], sample_chunks, vectors)

        assert [item.chunk.id for item in results] == ["cells"]


class TestFuse:
    """Test suite for hybrid fusion."""

    def test_should_produce_one_entry_per_chunk(self, sample_chunks) -> None:
        """Test output covers every chunk exactly once with scores in [0, 1]."""
        # Arrange
        bm25 = bm25_score("newton energy", sample_chunks)
        emb = [ScoredChunk(chunk=chunk, score=0.1 * i) for i, chunk in enumerate(sample_chunks)]

        # Act
        results = fuse(bm25, emb, alpha=0.5)

        # Assert
        ids = [item.chunk.id for item in results]
        assert sorted(ids) == sorted(chunk.id for chunk in sample_chunks)
        assert len(set(ids)) == len(ids)
        assert all(0.0 <= item.hybrid <= 1.0 for item in results)

    def test_should_normalize_by_max_and_blend(self, sample_chunks) -> None:
        """Test each signal is divided by its own maximum before blending."""
        # Arrange
        a, b, c = sample_chunks
        bm25 = [ScoredChunk(chunk=a, score=4.0), ScoredChunk(chunk=b, score=2.0), ScoredChunk(chunk=c, score=0.0)]
        emb = [ScoredChunk(chunk=b, score=0.8), ScoredChunk(chunk=a, score=0.4), ScoredChunk(chunk=c, score=0.2)]

        # Act
        results = {item.chunk.id: item for item in fuse(bm25, emb, alpha=0.25)}

        # Assert
        assert results[a.id].bm25_norm == pytest.approx(1.0)
        assert results[b.id].bm25_norm == pytest.approx(0.5)
        assert results[b.id].emb_norm == pytest.approx(1.0)
        assert results[a.id].hybrid == pytest.approx(0.25 * 1.0 + 0.75 * 0.5)

    def test_should_floor_near_zero_maximum(self, sample_chunks) -> None:
        """Test an all-zero signal normalizes to zero instead of dividing by zero."""
        bm25 = [ScoredChunk(chunk=chunk, score=0.0) for chunk in sample_chunks]
        emb = [ScoredChunk(chunk=chunk, score=0.0005) for chunk in sample_chunks]

        results = fuse(bm25, emb)

        assert all(item.bm25_norm == 0.0 for item in results)
        assert all(item.emb_norm == pytest.approx(0.5) for item in results)

    def test_should_treat_missing_signal_as_zero(self, sample_chunks) -> None:
        """Test a chunk present in only one ranking gets 0 for the other."""
        a, b, _ = sample_chunks
        results = {item.chunk.id: item for item in fuse([ScoredChunk(chunk=a, score=1.0)], [ScoredChunk(chunk=b, score=1.0)])}

        assert results[a.id].emb_norm == 0.0
        assert results[b.id].bm25_norm == 0.0

    def test_should_clamp_negative_cosine_scores(self, sample_chunks) -> None:
        """Test negative similarities normalize to zero."""
        a, b, _ = sample_chunks
        emb = [ScoredChunk(chunk=a, score=0.5), ScoredChunk(chunk=b, score=-0.5)]

        results = {item.chunk.id: item for item in fuse([], emb)}

        assert results[b.id].emb_norm == 0.0

    def test_should_break_ties_by_chunk_id(self, chunk_factory) -> None:
        """Test equal hybrid scores are ordered by chunk id."""
        chunks = [chunk_factory("alpha", chunk_id=name) for name in ("zeta", "beta", "mu")]
        scored = [ScoredChunk(chunk=chunk, score=1.0) for chunk in chunks]

        results = fuse(scored, scored)

        assert [item.chunk.id for item in results] == ["beta", "mu", "zeta"]

    def test_should_reject_alpha_outside_unit_interval(self) -> None:
        """Test alpha must lie in [0, 1]."""
        with pytest.raises(ValueError):
            fuse([], [], alpha=1.5)
