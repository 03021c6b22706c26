"""
Logging utilities for safe structured logging.

Provides helpers for logging per-item pipeline outcomes with context
without string concatenation errors.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from typing import Any


def safe_log_value(value: Any, max_length: int = 500) -> str:
    """
    Safely convert any value to a string for logging.

    Handles lists, dicts, None, and other types safely.

    Args:
        value: Value to convert
        max_length: Maximum length before truncating

    Returns:
        str: Safe string representation
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, str):
            val_str = value
        elif isinstance(value, (list, tuple)):
            val_str = f"{type(value).__name__}({len(value)} items)"
        elif isinstance(value, dict):
            val_str = f"dict({len(value)} keys)"
        else:
            val_str = str(value)

        if len(val_str) > max_length:
            return val_str[:max_length] + f"... (truncated, {len(val_str)} total)"
        return val_str
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"


def _format_context(context: dict[str, Any]) -> str:
    return " ".join(f"{key}={safe_log_value(val)}" for key, val in context.items())


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context,
) -> None:
    """
    Log a message with structured context, safely converting all values.

    Context is appended to the message as key=value pairs and also attached
    to the record under ``context``.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: Context dict with arbitrary key-value pairs
    """
    safe_context = {key: safe_log_value(val) for key, val in context.items()}
    suffix = _format_context(context)
    logger.log(level, f"{message} {suffix}".rstrip(), extra={"context": safe_context})


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: Exception,
    **context,
) -> None:
    """
    Log an exception at WARNING level with full context.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance
        **context: Additional context dict
    """
    context = dict(context)
    context.update({
        "error_type": type(exc).__name__,
        "error_msg": str(exc),
    })
    safe_context = {key: safe_log_value(val) for key, val in context.items()}
    logger.warning(f"{message} {_format_context(context)}", extra={"context": safe_context})
