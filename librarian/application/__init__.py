"""
Application services.

Chunking, indexing, hybrid search, grounded answers and batch study-set
generation built on the core scoring and generation components.
"""

from librarian.application.answer_service import AnswerService, GroundedAnswer
from librarian.application.chunker import ParagraphChunker
from librarian.application.indexer import CorpusIndexer, IndexReport
from librarian.application.retrieval_service import HybridSearchService
from librarian.application.study_service import SkippedItem, StudySetResult, StudySetService

__all__ = [
    "AnswerService",
    "CorpusIndexer",
    "GroundedAnswer",
    "HybridSearchService",
    "IndexReport",
    "ParagraphChunker",
    "SkippedItem",
    "StudySetResult",
    "StudySetService",
]
