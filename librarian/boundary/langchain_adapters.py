"""
LangChain capability adapters.

Wrap any LangChain ``Embeddings`` implementation and any ``BaseChatModel``
so they satisfy the Embedder and TextGenerator protocols. Embeddings are
L2-normalized on the way out so the semantic scorer can use a plain dot
product.

Dependencies: langchain_core
System role: Runtime adapters for embedding and chat models
"""

import logging
from typing import AsyncIterator

from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from librarian.boundary.capabilities import GenerationParams, PromptMessages
from librarian.core.exceptions import CapabilityFailure
from librarian.core.retrieval.semantic import l2_normalize

logger = logging.getLogger(__name__)


class LangChainEmbedder:
    """Embedder backed by a LangChain Embeddings model."""

    def __init__(self, embeddings: Embeddings, dimensions: int | None = None) -> None:
        """
        Initialize embedder.

        Args:
            embeddings: LangChain embeddings model
            dimensions: Expected vector dimension (checked when given)
        """
        self._embeddings = embeddings
        self._dimensions = dimensions

    async def embed(self, text: str) -> list[float]:
        vector = await self._embeddings.aembed_query(text)
        if self._dimensions is not None and len(vector) != self._dimensions:
            raise CapabilityFailure(
                f"Expected {self._dimensions}-dimensional embedding, got {len(vector)}",
                "embed",
            )
        try:
            return l2_normalize(vector)
        except ValueError as e:
            raise CapabilityFailure(str(e), "embed") from e


class LangChainChatGenerator:
    """TextGenerator backed by a LangChain chat model."""

    def __init__(self, model: BaseChatModel, pass_sampling_params: bool = True) -> None:
        """
        Initialize generator.

        Args:
            model: LangChain chat model
            pass_sampling_params: Forward max_tokens/temperature as call kwargs.
                Disable for models that reject them.
        """
        self._model = model
        self._pass_sampling_params = pass_sampling_params

    async def stream(self, prompt: PromptMessages, params: GenerationParams) -> AsyncIterator[str]:
        messages = [SystemMessage(content=prompt.system), HumanMessage(content=prompt.user)]
        kwargs = {}
        if self._pass_sampling_params:
            kwargs = {"max_tokens": params.max_tokens, "temperature": params.temperature}

        async for chunk in self._model.astream(messages, **kwargs):
            content = chunk.content
            if isinstance(content, str):
                if content:
                    yield content
            else:
                # Content blocks (list of str / dicts with "text")
                for block in content:
                    if isinstance(block, str):
                        yield block
                    elif isinstance(block, dict) and block.get("text"):
                        yield block["text"]
