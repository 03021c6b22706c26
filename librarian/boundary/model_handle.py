"""
Exclusive model handle.

The embedding and generation runtimes share one underlying model that does
not tolerate concurrent use. Every call goes through a single asyncio lock,
so at most one embed or generate request is in flight at any moment,
regardless of how many workers the caller runs.

Streaming output is concatenated before it is returned. If the stream
fails part way, the partial text is discarded and the failure surfaces as a
CapabilityFailure; it is never handed to the JSON extractor.

Dependencies: asyncio, librarian.boundary.capabilities
System role: Serialized access to the shared model runtime
"""

import asyncio
import logging
import time

from librarian.boundary.capabilities import (
    Embedder,
    GenerationParams,
    PromptMessages,
    TextGenerator,
)
from librarian.core.exceptions import CapabilityFailure, LibrarianException

logger = logging.getLogger(__name__)


class ExclusiveModelHandle:
    """Serializes embed and generate calls on a shared model."""

    def __init__(self, embedder: Embedder, generator: TextGenerator) -> None:
        """
        Initialize handle.

        Args:
            embedder: Embedding capability
            generator: Text generation capability
        """
        self._embedder = embedder
        self._generator = generator
        self._lock = asyncio.Lock()
        self._active = 0
        self.max_observed_concurrency = 0
        self.call_count = 0

    def _enter(self) -> None:
        self._active += 1
        self.call_count += 1
        self.max_observed_concurrency = max(self.max_observed_concurrency, self._active)

    def _exit(self) -> None:
        self._active -= 1

    async def embed(self, text: str) -> list[float]:
        """
        Embed text with exclusive access to the model.

        Args:
            text: Text to embed

        Returns:
            list[float]: Embedding vector

        Raises:
            CapabilityFailure: When the embedder fails
        """
        async with self._lock:
            self._enter()
            try:
                vector = await self._embedder.embed(text)
            except LibrarianException:
                raise
            except Exception as e:
                logger.error(f"{__name__}:embed - {type(e).__name__}: {e}")
                raise CapabilityFailure(f"Embedding failed: {e}", "embed") from e
            finally:
                self._exit()

        return list(vector)

    async def generate_text(self, prompt: PromptMessages, params: GenerationParams) -> str:
        """
        Generate a complete response with exclusive access to the model.

        Args:
            prompt: System and user messages
            params: Sampling parameters

        Returns:
            str: Concatenated streamed output

        Raises:
            CapabilityFailure: When the generator fails, including mid-stream
        """
        async with self._lock:
            self._enter()
            start = time.perf_counter()
            fragments: list[str] = []
            try:
                async for fragment in self._generator.stream(prompt, params):
                    fragments.append(fragment)
            except LibrarianException:
                raise
            except Exception as e:
                logger.error(
                    f"{__name__}:generate_text - Stream failed after "
                    f"{len(fragments)} fragments: {type(e).__name__}: {e}"
                )
                raise CapabilityFailure(f"Generation failed: {e}", "generate") from e
            finally:
                self._exit()

        text = "".join(fragments)
        logger.debug(
            f"{__name__}:generate_text - Generated {len(text)} chars "
            f"in {time.perf_counter() - start:.2f}s"
        )
        return text
