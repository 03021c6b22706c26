"""
Shared test fixtures and configuration for entire test suite.

Provides: chunk factories, scripted text generator, bag-of-words embedder,
model handle wiring
Dependencies: pytest
System role: Test infrastructure and fixture management
"""

import json
import math
from typing import Callable

import pytest

from librarian.boundary.capabilities import GenerationParams, PromptMessages
from librarian.boundary.model_handle import ExclusiveModelHandle
from librarian.core.retrieval.tokenizer import tokenize
from librarian.models.chunk import Chunk

VALID_QUIZ = {
    "question": "What does Newton's first law state about an object at rest?",
    "options": [
        "It stays at rest unless acted on",
        "It accelerates at a constant rate",
        "It gradually loses its mass",
        "It converts motion into heat",
    ],
    "correctIndex": 0,
    "explanation": "Newton's first law states an object at rest stays at rest.",
}

VALID_FLASHCARD = {
    "question": "What does Newton's first law say about objects at rest?",
    "answer": "An object at rest stays at rest unless a force acts on it.",
}

VALID_OPEN_ENDED = {
    "question": "Explain how Newton's first law describes the behaviour of objects at rest.",
    "idealAnswer": "Newton's first law says an object at rest stays at rest unless an outside force acts on it.",
    "keyPoints": ["inertia", "net force"],
}


class ScriptedGenerator:
    """
    Text generator returning scripted outputs in call order.

    An Exception entry is raised instead of streamed. The last entry is
    reused once the script runs out.
    """

    def __init__(self, outputs: list) -> None:
        self.outputs = list(outputs)
        self.prompts: list[PromptMessages] = []
        self.params: list[GenerationParams] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def stream(self, prompt: PromptMessages, params: GenerationParams):
        self.prompts.append(prompt)
        self.params.append(params)
        output = self.outputs[min(len(self.prompts), len(self.outputs)) - 1]
        if isinstance(output, Exception):
            raise output
        middle = len(output) // 2
        yield output[:middle]
        yield output[middle:]


class BagOfWordsEmbedder:
    """Deterministic embedder: normalized term counts over a fixed vocabulary."""

    def __init__(self, vocabulary: list[str]) -> None:
        self.vocabulary = vocabulary
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        tokens = tokenize(text)
        # Trailing constant keeps vectors for out-of-vocabulary text non-zero
        vector = [float(tokens.count(term)) for term in self.vocabulary] + [0.1]
        norm = math.sqrt(sum(x * x for x in vector))
        return [x / norm for x in vector]


@pytest.fixture
def chunk_factory() -> Callable[..., Chunk]:
    """Provide a factory for chunks with sequential ids."""
    counter = {"n": 0}

    def make(text: str, source: str = "physics.md", section: str | None = None, chunk_id: str | None = None) -> Chunk:
        counter["n"] += 1
        return Chunk(
            id=chunk_id or f"chunk-{counter['n']:03d}",
            text=text,
            source=source,
            section=section,
        )

    return make


@pytest.fixture
def newton_chunk() -> Chunk:
    """Provide the single-sentence Newton chunk."""
    return Chunk(
        id="newton",
        text="Newton's first law states an object at rest stays at rest.",
        source="physics.md",
    )


@pytest.fixture
def sample_chunks(newton_chunk: Chunk) -> list[Chunk]:
    """Provide a small mixed-topic corpus."""
    return [
        newton_chunk,
        Chunk(
            id="cells",
            text="Mitochondria produce energy for the cell through respiration.",
            source="biology.md",
        ),
        Chunk(
            id="rome",
            text="The Roman Republic was founded after the monarchy was overthrown.",
            source="history.md",
        ),
    ]


@pytest.fixture
def embedder() -> BagOfWordsEmbedder:
    """Provide a bag-of-words embedder over a small physics/biology vocabulary."""
    return BagOfWordsEmbedder(["newton", "first", "law", "rest", "object", "mitochondria", "energy", "cell", "roman"])


@pytest.fixture
def quiz_json() -> str:
    """Provide a valid quiz answer wrapped in chatter."""
    return f"Here is your question:\n{json.dumps(VALID_QUIZ)}\nGood luck!"


@pytest.fixture
def make_handle(embedder: BagOfWordsEmbedder) -> Callable[[list], tuple[ExclusiveModelHandle, ScriptedGenerator]]:
    """Provide a factory wiring a scripted generator into a model handle."""

    def make(outputs: list) -> tuple[ExclusiveModelHandle, ScriptedGenerator]:
        generator = ScriptedGenerator(outputs)
        return ExclusiveModelHandle(embedder, generator), generator

    return make


@pytest.fixture
def valid_quiz() -> dict:
    """Provide a valid quiz payload (camelCase keys)."""
    return json.loads(json.dumps(VALID_QUIZ))


@pytest.fixture
def valid_flashcard() -> dict:
    """Provide a valid flashcard payload."""
    return dict(VALID_FLASHCARD)


@pytest.fixture
def valid_open_ended() -> dict:
    """Provide a valid open-ended payload."""
    return json.loads(json.dumps(VALID_OPEN_ENDED))


@pytest.fixture
def scripted_generator() -> Callable[[list], ScriptedGenerator]:
    """Provide a factory for scripted text generators."""
    return ScriptedGenerator
