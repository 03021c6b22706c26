"""
Fine-tuning dataset export.

Accepted quiz questions are turned back into training examples: the chunk
that produced a question becomes the user prompt and the question JSON the
assistant reply, wrapped in a chat template and written one JSON object per
line (``{"text": ...}``).

Dependencies: json, random, pathlib
System role: Training data for the quiz generation model
"""

import json
import logging
import random
import re
from pathlib import Path
from typing import Iterable, NamedTuple, Sequence

from librarian.models.artifact import QuizQuestion
from librarian.models.chunk import Chunk

logger = logging.getLogger(__name__)

TRAINING_SYSTEM_PROMPT = "You create educational multiple choice questions. Output valid JSON only."
TRAINING_CONTEXT_CHARS = 800
DEFAULT_VALIDATION_RATIO = 0.1

ASSISTANT_TAG = "<|assistant|>"
END_TAG = "<|end|>"

_WHITESPACE = re.compile(r"\s+")


class DatasetCheck(NamedTuple):
    valid: int
    invalid: int


def format_training_example(question: QuizQuestion, chunk: Chunk) -> str:
    """Render one question as a chat-template training line."""
    user_prompt = (
        "Create a multiple choice question from this text.\n\n"
        f'Text from "{chunk.source}":\n'
        f"{chunk.text[:TRAINING_CONTEXT_CHARS]}\n\n"
        'Output JSON: {"question": "...", "options": ["A", "B", "C", "D"], '
        '"correctIndex": 0, "explanation": "..."}'
    )
    assistant = json.dumps(
        {
            "question": question.question,
            "options": question.options,
            "correctIndex": question.correct_index,
            "explanation": question.explanation,
        },
        ensure_ascii=False,
    )
    text = (
        f"<|system|>\n{TRAINING_SYSTEM_PROMPT}{END_TAG}\n"
        f"<|user|>\n{user_prompt}{END_TAG}\n"
        f"{ASSISTANT_TAG}\n{assistant}{END_TAG}"
    )
    return json.dumps({"text": text}, ensure_ascii=False)


def deduplicate_questions(questions: Iterable[QuizQuestion]) -> list[QuizQuestion]:
    """Drop questions whose normalized text was already seen, keeping the first."""
    seen: set[str] = set()
    unique = []
    for question in questions:
        key = _WHITESPACE.sub(" ", question.question.lower()).strip()
        if key in seen:
            continue
        seen.add(key)
        unique.append(question)
    return unique


def export_training_examples(
    questions: Sequence[QuizQuestion],
    chunks: Sequence[Chunk],
    output_path: str | Path,
) -> int:
    """
    Write accepted questions as JSONL training data.

    Questions whose chunk is not in ``chunks`` are skipped.

    Args:
        questions: Accepted quiz questions
        chunks: Corpus the questions were generated from
        output_path: JSONL destination

    Returns:
        int: Number of lines written
    """
    by_id = {chunk.id: chunk for chunk in chunks}
    lines = []
    for question in deduplicate_questions(questions):
        chunk = by_id.get(question.chunk_id)
        if chunk is None:
            logger.warning(
                f"{__name__}:export_training_examples - Chunk {question.chunk_id} not found, skipping"
            )
            continue
        lines.append(format_training_example(question, chunk))

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text("\n".join(lines), encoding="utf-8")
    logger.info(f"{__name__}:export_training_examples - Wrote {len(lines)} examples to {output_path}")
    return len(lines)


def _read_lines(path: Path) -> list[str]:
    return [line for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


def split_training_data(
    input_path: str | Path,
    train_path: str | Path,
    valid_path: str | Path,
    validation_ratio: float = DEFAULT_VALIDATION_RATIO,
    seed: int | None = None,
) -> tuple[int, int]:
    """
    Shuffle a JSONL file and split it into train and validation files.

    At least one line always goes to validation.

    Args:
        input_path: JSONL file to split
        train_path: Training split destination
        valid_path: Validation split destination
        validation_ratio: Share of lines used for validation
        seed: Shuffle seed for reproducible splits

    Returns:
        tuple[int, int]: (train lines, validation lines)
    """
    if not 0.0 < validation_ratio < 1.0:
        raise ValueError("validation_ratio must be within (0, 1)")

    lines = _read_lines(Path(input_path))
    random.Random(seed).shuffle(lines)

    valid_count = min(max(1, int(len(lines) * validation_ratio)), len(lines))
    valid_lines = lines[:valid_count]
    train_lines = lines[valid_count:]

    Path(train_path).write_text("\n".join(train_lines), encoding="utf-8")
    Path(valid_path).write_text("\n".join(valid_lines), encoding="utf-8")
    return len(train_lines), len(valid_lines)


def validate_training_data(path: str | Path) -> DatasetCheck:
    """
    Count well-formed and malformed training lines.

    A line is valid when it is a JSON object whose string ``text`` field
    contains an assistant turn terminated by an end tag.
    """
    valid = invalid = 0
    for line in _read_lines(Path(path)):
        try:
            record = json.loads(line)
        except json.JSONDecodeError:
            invalid += 1
            continue
        text = record.get("text") if isinstance(record, dict) else None
        if isinstance(text, str) and ASSISTANT_TAG in text and END_TAG in text:
            valid += 1
        else:
            invalid += 1
    return DatasetCheck(valid=valid, invalid=invalid)
