"""
Observability module.

Provides structured logging helpers and correlation ID tracking.
"""

from librarian.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from librarian.observability.logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
]
