"""
JSON extraction from free-form model output.

Models wrap their JSON in prose, markdown fences or trailing commentary.
The extractor scans for balanced ``{...}`` / ``[...]`` spans, tracking string
literals and escapes so braces inside an explanation string do not end the
span early, and returns the first span that parses to an object-bearing
value.

Dependencies: json
System role: Raw output -> JSON payload
"""

import json
import logging
import re
from typing import Any

from librarian.core.exceptions import ExtractionFailure

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?")

_CLOSERS = {"{": "}", "[": "]"}


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence markers, keeping their contents."""
    if "```" not in text:
        return text
    return _FENCE_PATTERN.sub("", text).strip()


def _balanced_end(text: str, start: int) -> int | None:
    """
    Find the index of the bracket closing the one at ``start``.

    Returns None when the span never balances or brackets are mismatched.
    """
    stack = [_CLOSERS[text[start]]]
    in_string = False
    escaped = False

    for index in range(start + 1, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(_CLOSERS[char])
        elif char in ("}", "]"):
            if char != stack.pop():
                return None
            if not stack:
                return index
    return None


def iter_json_candidates(text: str):
    """Yield balanced bracket spans in order of their opening position."""
    for start, char in enumerate(text):
        if char not in _CLOSERS:
            continue
        end = _balanced_end(text, start)
        if end is not None:
            yield text[start : end + 1]


def _carries_object(value: Any) -> bool:
    if isinstance(value, dict):
        return True
    return isinstance(value, list) and any(isinstance(item, dict) for item in value)


def extract_json(raw: str) -> Any:
    """
    Extract the JSON payload from raw output.

    Spans are tried in order of their opening bracket. The first one holding
    an object (or an array with an object in it) wins, so bracketed asides
    such as a ``[1]`` citation before the payload are passed over. When no
    span carries an object, the first span that parses is returned.

    Args:
        raw: Complete model output

    Returns:
        Any: Parsed JSON value (dict or list)

    Raises:
        ExtractionFailure: When no balanced span parses as JSON
    """
    text = strip_code_fences(raw)
    if not any(char in text for char in _CLOSERS):
        raise ExtractionFailure("No JSON object or array found in model output", raw)

    fallback = None
    for span in iter_json_candidates(text):
        try:
            value = json.loads(span)
        except json.JSONDecodeError:
            continue
        if _carries_object(value):
            return value
        if fallback is None:
            fallback = value

    if fallback is not None:
        return fallback

    logger.debug(f"{__name__}:extract_json - No parseable span in {len(raw)} chars of output")
    raise ExtractionFailure("Model output contains no well-formed JSON value", raw)
