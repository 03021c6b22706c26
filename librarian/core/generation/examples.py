"""
Few-shot quiz examples.

Gold-standard multiple choice questions per difficulty, inserted into the
quiz system prompt. Each example is fully self-contained: it names the
person, event or concept it asks about.

Dependencies: json, random
System role: Few-shot material for quiz prompts
"""

import json
import random
from typing import NamedTuple

from librarian.models.artifact import Difficulty


class QuizExample(NamedTuple):
    text: str
    question: str
    options: tuple[str, str, str, str]
    correct_index: int
    explanation: str


EASY_EXAMPLES = (
    QuizExample(
        text="The Silk Road was an ancient network of trade routes connecting East and West, established during the Han Dynasty around 130 BCE.",
        question="When was the Silk Road established?",
        options=("130 BCE", "500 CE", "1200 CE", "50 BCE"),
        correct_index=0,
        explanation="The Silk Road was established during the Han Dynasty around 130 BCE.",
    ),
    QuizExample(
        text="Marco Polo was a Venetian merchant who traveled to China in the 13th century and wrote about his experiences in 'The Travels of Marco Polo'.",
        question="What was Marco Polo's profession?",
        options=("Merchant", "Soldier", "Priest", "Scholar"),
        correct_index=0,
        explanation="Marco Polo was a Venetian merchant who traveled to China.",
    ),
    QuizExample(
        text="DNA, or deoxyribonucleic acid, was first identified by Friedrich Miescher in 1869, though its structure wasn't discovered until 1953 by Watson and Crick.",
        question="Who first identified DNA in 1869?",
        options=("Friedrich Miescher", "James Watson", "Francis Crick", "Rosalind Franklin"),
        correct_index=0,
        explanation="Friedrich Miescher first identified DNA in 1869.",
    ),
    QuizExample(
        text="The human heart has four chambers: two atria (upper chambers) and two ventricles (lower chambers).",
        question="How many chambers does the human heart have?",
        options=("Four", "Two", "Three", "Six"),
        correct_index=0,
        explanation="The human heart has four chambers: two atria and two ventricles.",
    ),
)

MEDIUM_EXAMPLES = (
    QuizExample(
        text="Confucianism emphasizes filial piety, respect for elders, and social harmony, which influenced Chinese governance and social structures for over two thousand years.",
        question="Which philosophical tradition emphasized filial piety and social harmony, influencing Chinese governance for centuries?",
        options=("Confucianism", "Daoism", "Legalism", "Buddhism"),
        correct_index=0,
        explanation="Confucianism emphasizes filial piety, respect for elders, and social harmony.",
    ),
    QuizExample(
        text="The Treaty of Westphalia in 1648 established the principle of state sovereignty, ending the Thirty Years' War and fundamentally reshaping international relations in Europe.",
        question="What principle did the Treaty of Westphalia establish that reshaped European international relations?",
        options=("State sovereignty", "Divine right of kings", "Balance of power", "Colonial expansion rights"),
        correct_index=0,
        explanation="The Treaty of Westphalia established the principle of state sovereignty.",
    ),
    QuizExample(
        text="Inflation occurs when the general price level rises over time, reducing the purchasing power of money. Central banks often raise interest rates to combat high inflation.",
        question="How do central banks typically respond to high inflation?",
        options=(
            "By raising interest rates",
            "By printing more money",
            "By lowering taxes",
            "By increasing government spending",
        ),
        correct_index=0,
        explanation="Central banks often raise interest rates to combat high inflation by reducing spending and borrowing.",
    ),
)

HARD_EXAMPLES = (
    QuizExample(
        text="The examination system in imperial China was both a tool for social mobility and a mechanism for reinforcing Confucian orthodoxy, as it allowed talented individuals from humble backgrounds to enter government while ensuring they adopted state-sanctioned values.",
        question="What paradox characterized the imperial Chinese examination system's role in society?",
        options=(
            "It enabled social mobility while reinforcing ideological conformity",
            "It promoted military strength while weakening economic growth",
            "It encouraged foreign trade while isolating Chinese culture",
            "It expanded territory while reducing population",
        ),
        correct_index=0,
        explanation="The examination system enabled social mobility for talented individuals while ensuring they adopted Confucian orthodoxy.",
    ),
    QuizExample(
        text="Climate feedback loops can amplify warming: as Arctic ice melts, darker ocean water absorbs more heat, causing more melting, which in turn causes more warming in a self-reinforcing cycle.",
        question="Why does Arctic ice melt create a self-reinforcing warming cycle?",
        options=(
            "Darker ocean water absorbs more heat than reflective ice",
            "Melting ice releases stored carbon dioxide",
            "Ocean currents reverse direction when ice disappears",
            "Ice melt increases cloud cover blocking sunlight",
        ),
        correct_index=0,
        explanation="When ice melts, darker ocean water absorbs more heat than reflective ice, causing more melting and warming.",
    ),
    QuizExample(
        text="The Turing Test proposes that if a machine can converse indistinguishably from a human, it demonstrates intelligence, though critics argue this measures imitation rather than genuine understanding.",
        question="What criticism challenges the Turing Test as a measure of machine intelligence?",
        options=(
            "It measures imitation ability rather than genuine understanding",
            "It requires machines to have human-like physical bodies",
            "It can only be administered in English language",
            "It has never been successfully passed by any machine",
        ),
        correct_index=0,
        explanation="Critics argue the Turing Test measures imitation of human conversation rather than genuine understanding.",
    ),
)

DISTRACTOR_GUIDELINES = """DISTRACTOR QUALITY RULES:
1. SAME TYPE: All options must be the same category (all dates, all names, all concepts)
2. PLAUSIBLE: Distractors should be believable, not obviously wrong
3. DISTINCT: Each option should be clearly different from others
4. NO TRICKS: Avoid "all of the above" or "none of the above"
5. SIMILAR LENGTH: Options should have comparable length"""

_EXAMPLES_BY_DIFFICULTY = {
    Difficulty.EASY: EASY_EXAMPLES,
    Difficulty.MEDIUM: MEDIUM_EXAMPLES,
    Difficulty.HARD: HARD_EXAMPLES,
}


def get_examples(difficulty: Difficulty) -> tuple[QuizExample, ...]:
    return _EXAMPLES_BY_DIFFICULTY[difficulty]


def format_examples(
    difficulty: Difficulty,
    count: int = 3,
    rng: random.Random | None = None,
) -> str:
    """
    Render few-shot examples for the quiz system prompt.

    Args:
        difficulty: Difficulty whose examples are used
        count: Maximum number of examples
        rng: Shuffles the examples when given; otherwise the first ``count``
            are used so prompts stay reproducible

    Returns:
        str: Examples block followed by distractor guidelines
    """
    examples = list(get_examples(difficulty))
    if rng is not None:
        rng.shuffle(examples)

    lines = ["GOLD-STANDARD EXAMPLES:", ""]
    for index, example in enumerate(examples[:count], start=1):
        output = json.dumps(
            {
                "question": example.question,
                "options": list(example.options),
                "correctIndex": example.correct_index,
                "explanation": example.explanation,
            },
            ensure_ascii=False,
        )
        lines.append(f"Example {index}:")
        lines.append(f'Text: "{example.text}"')
        lines.append(f"Output: {output}")
        lines.append("")

    lines.append(DISTRACTOR_GUIDELINES)
    return "\n".join(lines)
