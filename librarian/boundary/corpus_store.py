"""
Corpus persistence.

Chunks are stored as a JSON array of objects with camelCase keys
(``id``, ``text``, ``source``, ``section``, ``wordCount``), the same layout
the desktop app writes.

Dependencies: pydantic, json
System role: Load and save chunk corpora
"""

import json
import logging
from pathlib import Path
from typing import Iterable

from pydantic import TypeAdapter, ValidationError

from librarian.core.exceptions import CorpusError
from librarian.models.chunk import Chunk

logger = logging.getLogger(__name__)

_CHUNK_LIST = TypeAdapter(list[Chunk])


def load_corpus(path: str | Path) -> list[Chunk]:
    """
    Load chunks from a JSON file.

    Args:
        path: JSON file path

    Returns:
        list[Chunk]: Chunks in file order

    Raises:
        CorpusError: When the file is missing, unreadable or malformed
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CorpusError(f"Cannot read corpus file: {e}", {"path": str(path)}) from e

    try:
        chunks = _CHUNK_LIST.validate_json(raw)
    except ValidationError as e:
        raise CorpusError(
            "Malformed corpus file",
            {"path": str(path), "errors": e.error_count()},
        ) from e

    seen: set[str] = set()
    for chunk in chunks:
        if chunk.id in seen:
            raise CorpusError("Duplicate chunk id in corpus file", {"chunk_id": chunk.id})
        seen.add(chunk.id)

    logger.info(f"{__name__}:load_corpus - Loaded {len(chunks)} chunks from {path}")
    return chunks


def save_corpus(chunks: Iterable[Chunk], path: str | Path) -> None:
    """
    Write chunks to a JSON file.

    Args:
        chunks: Chunks to persist
        path: Destination path (parent directories are created)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [chunk.model_dump(by_alias=True) for chunk in chunks]
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"{__name__}:save_corpus - Saved {len(payload)} chunks to {path}")
