"""
Paragraph chunker.

Splits a document on blank lines and packs whole paragraphs into chunks of
roughly ``target_words`` words. Paragraphs are never split, so a single long
paragraph becomes an oversized chunk of its own. Header paragraphs
("# Title", "Chapter 3 ...") update the section label for chunks started
after them.

Dependencies: hashlib, re, librarian.models.chunk
System role: Document -> chunk set
"""

import hashlib
import logging
import re
from typing import Iterable

from librarian.models.chunk import Chunk, Document, count_words

logger = logging.getLogger(__name__)

DEFAULT_TARGET_WORDS = 150

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_HEADER_PATTERN = re.compile(
    r"^(?:#{1,6}\s+\S|(?:Chapter|CHAPTER|Section|SECTION|Part|PART)\s+\S)"
)


def section_label(paragraph: str) -> str | None:
    """Return the section label if the paragraph starts with a header marker."""
    first_line = paragraph.lstrip().split("\n", 1)[0].strip()
    if not _HEADER_PATTERN.match(first_line):
        return None
    return first_line.lstrip("#").strip()


def chunk_id(source: str, ordinal: int, text: str) -> str:
    """Deterministic chunk identifier."""
    digest = hashlib.sha256(f"{source}:{ordinal}:{text}".encode("utf-8")).hexdigest()
    return digest[:16]


class ParagraphChunker:
    """Packs paragraphs into word-count-bounded chunks."""

    def __init__(self, target_words: int = DEFAULT_TARGET_WORDS) -> None:
        if target_words <= 0:
            raise ValueError("target_words must be positive")
        self.target_words = target_words

    def chunk(self, document: Document) -> list[Chunk]:
        """
        Chunk a single document.

        Flow:
        1. Split content on blank lines, dropping empty paragraphs
        2. Track the current section label from header paragraphs
        3. Flush the buffer when the next paragraph would exceed the target
        4. Flush whatever remains

        Args:
            document: Document to chunk

        Returns:
            list[Chunk]: Chunks in document order (empty for blank documents)
        """
        paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(document.content) if p.strip()]

        chunks: list[Chunk] = []
        buffer: list[str] = []
        buffer_words = 0
        buffer_section: str | None = None
        current_section: str | None = None

        def flush() -> None:
            text = "\n\n".join(buffer)
            chunks.append(
                Chunk(
                    id=chunk_id(document.name, len(chunks), text),
                    text=text,
                    source=document.name,
                    section=buffer_section,
                    word_count=count_words(text),
                )
            )

        for paragraph in paragraphs:
            label = section_label(paragraph)
            if label is not None:
                current_section = label

            words = count_words(paragraph)
            if buffer and buffer_words + words > self.target_words:
                flush()
                buffer, buffer_words = [], 0

            if not buffer:
                buffer_section = current_section
            buffer.append(paragraph)
            buffer_words += words

        if buffer:
            flush()

        logger.debug(f"{__name__}:chunk - {document.name}: {len(paragraphs)} paragraphs -> {len(chunks)} chunks")
        return chunks

    def chunk_documents(self, documents: Iterable[Document]) -> list[Chunk]:
        """Chunk several documents into one corpus, in document order."""
        corpus: list[Chunk] = []
        for document in documents:
            corpus.extend(self.chunk(document))
        return corpus
