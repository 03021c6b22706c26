"""
Generation task templates.

Defines the system and user prompts for quiz, flashcard and open-ended
generation. A TaskTemplate bundles the prompt with the artifact kind,
difficulty and sampling parameters; rendering it against a chunk yields the
structured ``{system, user}`` prompt the text generator consumes. The
grounded-answer prompt places retrieved passages ahead of a question.

JSON format examples and few-shot blocks are passed in as template
variables, so they never need brace escaping.

Dependencies: langchain_core.prompts
System role: Prompt construction for artifact generation
"""

import logging
from dataclasses import dataclass

from langchain_core.prompts import ChatPromptTemplate

from librarian.boundary.capabilities import GenerationParams, PromptMessages
from librarian.configs.generation import GenerationSettings
from librarian.core.generation.examples import format_examples
from librarian.models.artifact import ArtifactKind, Difficulty
from librarian.models.chunk import Chunk

logger = logging.getLogger(__name__)

QUIZ_SYSTEM_PROMPT = """You are an expert quiz creator. Create self-contained multiple choice questions.

CRITICAL RULES - VIOLATIONS WILL BE REJECTED:

1. SELF-CONTAINED: Someone who never read the source must understand the question
   - BAD: "What does the author argue about society?"
   - GOOD: "What does Wang Huning argue about American individualism in 'America Against America'?"

2. NO VAGUE REFERENCES - These phrases are BANNED:
   - "the text", "the passage", "the author", "the speaker"
   - "according to", "based on the text", "as mentioned"
   - "which of the following best describes"

3. NAME EVERYTHING EXPLICITLY:
   - BAD: "What year did this event occur?"
   - GOOD: "In what year did the Treaty of Westphalia end the Thirty Years' War?"

4. OPTIONS MUST BE:
   - Exactly 4 choices (just the answer text, no "A)" or "B)" prefixes)
   - All the same type (all dates, OR all names, OR all concepts)
   - Plausible and similar in length

{examples}"""

QUIZ_GUIDANCE = {
    Difficulty.EASY: """Think step by step:
1. IDENTIFY: Find a specific FACT (date, name, place, number, definition)
2. QUESTION: Write a complete, self-contained question
   - MUST include: WHO (full name), WHAT (specific event/concept), WHEN/WHERE if relevant
   - NOT: "When did this happen?" or "What did the author say?"
3. CORRECT ANSWER: The exact fact from the text
4. DISTRACTORS: 3 wrong answers of the SAME TYPE""",
    Difficulty.MEDIUM: """Think step by step:
1. IDENTIFY: Find a CONCEPT, CAUSE, or RELATIONSHIP
2. QUESTION: Write a "why" or "how" question that stands alone
   - MUST name the specific person, theory, event, or work being discussed
   - NOT: "Why does the author believe this?" or "What is the main argument?"
3. CORRECT ANSWER: Requires understanding, not just recall
4. DISTRACTORS: 3 plausible but wrong explanations""",
    Difficulty.HARD: """Think step by step:
1. IDENTIFY: Find an IMPLICATION, PARADOX, or ANALYTICAL point
2. QUESTION: Write a question requiring inference or synthesis
   - MUST provide full context: name the thinker, the work, the specific argument
   - NOT: "What is the deeper meaning?" or "What does the text imply?"
3. CORRECT ANSWER: Requires going beyond surface reading
4. DISTRACTORS: 3 sophisticated alternatives that would fool someone who only skimmed""",
}

QUIZ_OUTPUT_FORMAT = (
    '{"question": "Full self-contained question here?", '
    '"options": ["first answer", "second answer", "third answer", "fourth answer"], '
    '"correctIndex": 0, "explanation": "Why this answer is correct"}'
)

QUIZ_USER_PROMPT = """{guidance}

Create ONE question from this text. The question MUST be understandable without the source.

Source document: "{source}"{section}
Content:
{context}
{feedback}
Output ONLY valid JSON:
{output_format}"""

FLASHCARD_SYSTEM_PROMPT = """You are a helpful assistant that creates educational flashcards. Output valid JSON only.
The question must be understandable on its own. The answer must be a complete sentence, not a single word."""

FLASHCARD_GUIDANCE = {
    Difficulty.EASY: "Create an EASY flashcard - ask for a basic fact or definition.",
    Difficulty.MEDIUM: "Create a MEDIUM flashcard - ask how or why two ideas are related.",
    Difficulty.HARD: "Create a HARD flashcard - ask for an implication or comparison.",
}

FLASHCARD_OUTPUT_FORMAT = '{"question": "...", "answer": "..."}'

FLASHCARD_USER_PROMPT = """{guidance}

Create ONE flashcard with a question and answer from this text.

Text from "{source}"{section}:
{context}
{feedback}
Output as JSON: {output_format}"""

OPEN_ENDED_SYSTEM_PROMPT = """You create open-ended study questions. Output valid JSON only.
Questions must be SELF-CONTAINED - include all necessary context so someone who hasn't read the source can understand what's being asked.
NEVER use vague references like "the author", "the organization", "the theory" - always name them specifically."""

OPEN_ENDED_GUIDANCE = {
    Difficulty.EASY: "Create an EASY question - ask about a basic fact or definition that can be answered in 1-2 sentences.",
    Difficulty.MEDIUM: "Create a MEDIUM question - ask about relationships between concepts or require explanation.",
    Difficulty.HARD: "Create a HARD question - require analysis, comparison, or synthesis of multiple ideas.",
}

OPEN_ENDED_OUTPUT_FORMAT = (
    '{"question": "Explain the significance of the Silk Road in facilitating cultural exchange '
    'between China and Rome.", "idealAnswer": "The Silk Road was a network of trade routes '
    'connecting East and West, facilitating exchange of goods, culture, and ideas for over '
    '1,500 years.", "keyPoints": ["trade routes", "East-West connection", "cultural exchange"]}'
)

OPEN_ENDED_USER_PROMPT = """{guidance}

Create an open-ended question (not multiple choice) from this text.
Include the ideal answer that a student should provide.

Example:
{output_format}

Text from "{source}"{section}:
{context}
{feedback}
JSON:"""

QUIZ_PROMPT = ChatPromptTemplate.from_messages([
    ("system", QUIZ_SYSTEM_PROMPT),
    ("human", QUIZ_USER_PROMPT),
])

FLASHCARD_PROMPT = ChatPromptTemplate.from_messages([
    ("system", FLASHCARD_SYSTEM_PROMPT),
    ("human", FLASHCARD_USER_PROMPT),
])

OPEN_ENDED_PROMPT = ChatPromptTemplate.from_messages([
    ("system", OPEN_ENDED_SYSTEM_PROMPT),
    ("human", OPEN_ENDED_USER_PROMPT),
])

_PROMPTS = {
    ArtifactKind.QUIZ: (QUIZ_PROMPT, QUIZ_GUIDANCE, QUIZ_OUTPUT_FORMAT),
    ArtifactKind.FLASHCARD: (FLASHCARD_PROMPT, FLASHCARD_GUIDANCE, FLASHCARD_OUTPUT_FORMAT),
    ArtifactKind.OPEN_ENDED: (OPEN_ENDED_PROMPT, OPEN_ENDED_GUIDANCE, OPEN_ENDED_OUTPUT_FORMAT),
}


@dataclass(frozen=True)
class TaskTemplate:
    """
    One generation task: what to produce and how to sample it.

    Attributes:
        kind: Artifact kind the model is asked for
        difficulty: Difficulty level steering the guidance text
        prompt: System + human chat template
        params: Sampling parameters for this task
    """

    kind: ArtifactKind
    difficulty: Difficulty
    prompt: ChatPromptTemplate
    params: GenerationParams

    def render(
        self,
        chunk: Chunk,
        max_chars: int,
        feedback: list[str] | None = None,
    ) -> PromptMessages:
        """
        Render the task for one chunk.

        Args:
            chunk: Chunk to generate from
            max_chars: Maximum chunk characters placed in the prompt
            feedback: Reasons the previous attempt was rejected

        Returns:
            PromptMessages: Rendered system and user messages
        """
        _, guidance, output_format = _PROMPTS[self.kind]
        variables = {
            "guidance": guidance[self.difficulty],
            "source": chunk.source,
            "section": f" (section: {chunk.section})" if chunk.section else "",
            "context": chunk.text[:max_chars],
            "feedback": format_feedback(feedback),
            "output_format": output_format,
        }
        if self.kind is ArtifactKind.QUIZ:
            variables["examples"] = format_examples(self.difficulty)

        messages = self.prompt.format_messages(**variables)
        return PromptMessages(system=messages[0].content, user=messages[1].content)


def format_feedback(reasons: list[str] | None) -> str:
    """Render rejection reasons as a corrective note for the next attempt."""
    if not reasons:
        return ""
    bullet_list = "\n".join(f"- {reason}" for reason in reasons)
    return (
        "\nYour previous answer was rejected for these reasons:\n"
        f"{bullet_list}\n"
        "Fix every problem listed above.\n"
    )


def build_task_template(
    kind: ArtifactKind,
    difficulty: Difficulty = Difficulty.MEDIUM,
    settings: GenerationSettings | None = None,
) -> TaskTemplate:
    """
    Build the task template for an artifact kind.

    Args:
        kind: Artifact kind
        difficulty: Difficulty level
        settings: Generation settings supplying sampling parameters

    Returns:
        TaskTemplate: Ready-to-render template
    """
    settings = settings or GenerationSettings()
    prompt, _, _ = _PROMPTS[kind]

    if kind is ArtifactKind.QUIZ:
        params = GenerationParams(max_tokens=settings.quiz_max_tokens, temperature=settings.quiz_temperature)
    elif kind is ArtifactKind.FLASHCARD:
        params = GenerationParams(
            max_tokens=settings.flashcard_max_tokens,
            temperature=settings.flashcard_temperature,
        )
    else:
        params = GenerationParams(
            max_tokens=settings.open_ended_max_tokens,
            temperature=settings.open_ended_temperature,
        )

    logger.debug(f"{__name__}:build_task_template - {kind.value}/{difficulty.value} {params}")
    return TaskTemplate(kind=kind, difficulty=difficulty, prompt=prompt, params=params)


ANSWER_SYSTEM_PROMPT = """You are a knowledgeable research assistant. Answer questions based on the provided context.
If the context doesn't contain relevant information, say so and provide general knowledge. Be concise and accurate."""

ANSWER_USER_PROMPT = """Use the following context to answer the question:

{context}

---
Question: {query}"""

ANSWER_PROMPT = ChatPromptTemplate.from_messages([
    ("system", ANSWER_SYSTEM_PROMPT),
    ("human", ANSWER_USER_PROMPT),
])


def format_context_passage(chunk: Chunk) -> str:
    """Render one retrieved chunk, prefixed with its section label when it has one."""
    return f"[{chunk.section}] {chunk.text}" if chunk.section else chunk.text


def build_answer_prompt(query: str, chunks: list[Chunk]) -> PromptMessages:
    """
    Render the grounded-answer prompt.

    Args:
        query: Learner's question
        chunks: Retrieved passages, best first

    Returns:
        PromptMessages: Rendered system and user messages
    """
    context = "\n\n".join(format_context_passage(chunk) for chunk in chunks)
    messages = ANSWER_PROMPT.format_messages(context=context, query=query)
    return PromptMessages(system=messages[0].content, user=messages[1].content)
