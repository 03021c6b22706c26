"""
Lexical tokenizer.

Lowercases, splits on anything that is not a letter or digit and drops
tokens of length <= 2. Short tokens such as "49" or "AI" are therefore never
matched by lexical scoring.

Dependencies: re (stdlib)
System role: Shared normalizer for BM25 scoring
"""

import re

MIN_TOKEN_LENGTH = 3

_TOKEN_PATTERN = re.compile(r"[^\W_]+")


def tokenize(text: str) -> list[str]:
    """
    Split text into normalized terms.

    Args:
        text: Arbitrary text

    Returns:
        list[str]: Lowercased alphanumeric tokens at least 3 characters long
    """
    return [
        token
        for token in _TOKEN_PATTERN.findall(text.lower())
        if len(token) >= MIN_TOKEN_LENGTH
    ]
