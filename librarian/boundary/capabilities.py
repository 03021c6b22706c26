"""
Capability contracts.

The pipeline talks to exactly two external capabilities: an embedder that
maps text to a unit-length vector, and a text generator that streams tokens
for a (system, user) prompt pair. Both are structural protocols so any
runtime (a LangChain model, a local model, a test double) can be plugged in.

Dependencies: pydantic, typing
System role: Interface between pipeline logic and model runtimes
"""

from typing import AsyncIterator, Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class PromptMessages(BaseModel):
    """Rendered prompt ready for a text generator."""

    model_config = ConfigDict(frozen=True)

    system: str
    user: str


class GenerationParams(BaseModel):
    """Sampling parameters for one generation call."""

    model_config = ConfigDict(frozen=True)

    max_tokens: int = Field(default=512, gt=0)
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)


@runtime_checkable
class Embedder(Protocol):
    """Maps text to a fixed-dimension, L2-normalized vector."""

    async def embed(self, text: str) -> Sequence[float]:
        ...


@runtime_checkable
class TextGenerator(Protocol):
    """Streams generated text fragments for a prompt."""

    def stream(self, prompt: PromptMessages, params: GenerationParams) -> AsyncIterator[str]:
        ...
