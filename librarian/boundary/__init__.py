"""
Boundary layer.

Adapters between the pipeline and external runtimes: the embedding and
text-generation capabilities, the exclusive model handle that serializes
access to them, and on-disk corpus persistence.
"""

from librarian.boundary.capabilities import (
    Embedder,
    GenerationParams,
    PromptMessages,
    TextGenerator,
)
from librarian.boundary.corpus_store import load_corpus, save_corpus
from librarian.boundary.model_handle import ExclusiveModelHandle

__all__ = [
    "Embedder",
    "GenerationParams",
    "PromptMessages",
    "TextGenerator",
    "ExclusiveModelHandle",
    "load_corpus",
    "save_corpus",
]
