"""
Validated generation.

Prompt construction, JSON extraction, candidate parsing and validation,
and the bounded retry loop that turns a chunk into an accepted study item.
"""

from librarian.core.generation.discussion import DiscussionTutor
from librarian.core.generation.extraction import extract_json
from librarian.core.generation.orchestrator import GenerationOrchestrator
from librarian.core.generation.parsing import (
    clean_option_label,
    parse_candidate,
    shuffle_options,
    to_artifact,
)
from librarian.core.generation.prompts import TaskTemplate, build_task_template
from librarian.core.generation.quality import score_candidate, select_best, self_containment_score
from librarian.core.generation.retry import RetryController
from librarian.core.generation.validator import ArtifactValidator

__all__ = [
    "ArtifactValidator",
    "DiscussionTutor",
    "GenerationOrchestrator",
    "RetryController",
    "TaskTemplate",
    "build_task_template",
    "clean_option_label",
    "extract_json",
    "parse_candidate",
    "score_candidate",
    "select_best",
    "self_containment_score",
    "shuffle_options",
    "to_artifact",
]
