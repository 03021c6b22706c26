"""
Grounded answer service.

Answers a free-text question from the indexed corpus: the top search
results are placed in the prompt as context and the model's reply is
returned with the chunks it was grounded on.

Multi-hop mode runs a second search with a follow-up query made of the
original question plus the most frequent new terms in the first hop's
passages. Passages already collected (same source and text prefix) are not
added twice.

Dependencies: collections, re, librarian.application.retrieval_service
System role: Retrieval-augmented question answering
"""

import logging
import re
from collections import Counter
from typing import Sequence

from pydantic import BaseModel, Field

from librarian.application.retrieval_service import HybridSearchService
from librarian.boundary.capabilities import GenerationParams
from librarian.boundary.model_handle import ExclusiveModelHandle
from librarian.core.generation.prompts import build_answer_prompt
from librarian.models.chunk import Chunk

logger = logging.getLogger(__name__)

MAX_HOPS = 2
FOLLOW_UP_TERMS = 3
MIN_FOLLOW_UP_TERM_CHARS = 5
DEDUP_PREFIX_CHARS = 50

FOLLOW_UP_STOP_WORDS = frozenset({
    "the", "and", "for", "that", "this", "with", "from", "have", "has",
    "been", "were", "was", "are", "will", "would", "could", "should",
    "their", "there", "they", "them", "these", "those", "which", "what",
    "when", "where", "about", "into", "over", "also", "more", "some",
    "such", "than", "then", "only", "other", "being", "made", "many",
})

_NON_ALNUM = re.compile(r"[^0-9a-z]+")


class GroundedAnswer(BaseModel):
    """Model answer plus the passages it was given."""

    query: str
    answer: str
    sources: list[Chunk] = Field(default_factory=list)
    queries: list[str] = Field(default_factory=list)


def follow_up_query(query: str, passages: Sequence[Chunk]) -> str:
    """
    Extend a query with the most frequent new terms in retrieved passages.

    Terms must be longer than four characters, absent from the query and
    not stop words. Ties keep first-seen order.

    Args:
        query: Original question
        passages: Passages retrieved so far

    Returns:
        str: Expanded query, or the original when no term qualifies
    """
    query_words = set(query.lower().split())
    words = _NON_ALNUM.split(" ".join(chunk.text for chunk in passages).lower())
    counts = Counter(
        word
        for word in words
        if len(word) >= MIN_FOLLOW_UP_TERM_CHARS
        and word not in query_words
        and word not in FOLLOW_UP_STOP_WORDS
    )
    terms = [word for word, _ in counts.most_common(FOLLOW_UP_TERMS)]
    if not terms:
        return query
    return f"{query} {' '.join(terms)}"


class AnswerService:
    """Answers questions from search results over the active corpus."""

    def __init__(
        self,
        model_handle: ExclusiveModelHandle,
        search_service: HybridSearchService,
        params: GenerationParams | None = None,
        default_top_k: int = 5,
    ) -> None:
        """
        Initialize answer service.

        Args:
            model_handle: Shared model handle
            search_service: Hybrid search over the active corpus
            params: Sampling parameters for the answer
            default_top_k: Passages retrieved per hop when top_k is omitted
        """
        self.model_handle = model_handle
        self.search_service = search_service
        self.params = params or GenerationParams(max_tokens=512, temperature=0.7)
        self.default_top_k = default_top_k

    @staticmethod
    def _passage_key(chunk: Chunk) -> str:
        return f"{chunk.source}:{chunk.text[:DEDUP_PREFIX_CHARS]}"

    async def retrieve_context(
        self,
        query: str,
        top_k: int,
        multi_hop: bool = False,
    ) -> tuple[list[Chunk], list[str]]:
        """
        Collect context passages for a question.

        Args:
            query: Learner's question
            top_k: Passages retrieved per hop
            multi_hop: Run a follow-up search with an expanded query

        Returns:
            tuple[list[Chunk], list[str]]: Unique passages in retrieval
                order, and the queries that were searched
        """
        hops = MAX_HOPS if multi_hop else 1
        passages: list[Chunk] = []
        seen: set[str] = set()
        queries: list[str] = []
        current = query

        for hop in range(hops):
            queries.append(current)
            results = await self.search_service.search(current, top_k=top_k)
            for result in results:
                key = self._passage_key(result.chunk)
                if key not in seen:
                    seen.add(key)
                    passages.append(result.chunk)

            if hop == hops - 1 or not passages:
                break
            expanded = follow_up_query(query, passages)
            if expanded == current:
                break
            current = expanded

        return passages, queries

    async def generate_answer(
        self,
        query: str,
        top_k: int | None = None,
        multi_hop: bool = False,
    ) -> GroundedAnswer:
        """
        Answer a question grounded on retrieved passages.

        Flow:
        1. Search the corpus (twice in multi-hop mode)
        2. Render the context prompt
        3. Generate and trim the reply

        Args:
            query: Learner's question
            top_k: Passages per hop (service default when omitted)
            multi_hop: Follow up with an expanded query

        Returns:
            GroundedAnswer: Reply and the passages used

        Raises:
            CapabilityFailure: When embedding or generation fails
        """
        top_k = self.default_top_k if top_k is None else top_k
        passages, queries = await self.retrieve_context(query, top_k, multi_hop)

        prompt = build_answer_prompt(query, passages)
        reply = await self.model_handle.generate_text(prompt, self.params)
        logger.info(
            f"{__name__}:generate_answer - {len(reply)} chars from {len(passages)} passages "
            f"over {len(queries)} searches"
        )
        return GroundedAnswer(query=query, answer=reply.strip(), sources=passages, queries=queries)
