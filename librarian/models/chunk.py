"""
Chunk domain model.

Represents a retrievable unit of document text with light metadata.
Field aliases follow the camelCase names of the persisted corpus format
(e.g. ``wordCount``).

Dependencies: pydantic
System role: Document chunk data structure
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def count_words(text: str) -> int:
    """Whitespace-split token count."""
    return len(text.split())


class Document(BaseModel):
    """Raw document handed to the chunker."""

    name: str = Field(description="Document identifier, used as chunk source")
    content: str = Field(description="Full document text")


class Chunk(BaseModel):
    """Immutable document chunk."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(min_length=1, description="Chunk identifier, unique within a corpus")
    text: str = Field(description="Chunk text content")
    source: str = Field(description="Name of the document the chunk came from")
    section: str | None = Field(default=None, description="Section label active at chunk start")
    word_count: int = Field(ge=0, description="Whitespace token count cached at creation")

    @model_validator(mode="before")
    @classmethod
    def _cache_word_count(cls, data: Any) -> Any:
        # Stored counts are trusted, never recomputed
        if not isinstance(data, dict) or not isinstance(data.get("text"), str):
            return data
        if data.get("word_count", data.get("wordCount")) is None:
            return {**data, "word_count": count_words(data["text"])}
        return data

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Chunk text must be non-empty")
        return value
