"""
Dependency wiring.

Factory functions that assemble the pipeline from settings and the two
external capabilities. Everything that touches the model shares a single
ExclusiveModelHandle, so embedding and generation calls never overlap.

Dependencies: librarian.configs, librarian.application, librarian.boundary,
    librarian.observability
System role: Composition root
"""

import random
from dataclasses import dataclass
from pathlib import Path

from librarian.application.answer_service import AnswerService
from librarian.application.chunker import ParagraphChunker
from librarian.application.indexer import CorpusIndexer
from librarian.application.retrieval_service import HybridSearchService
from librarian.application.study_service import StudySetService
from librarian.boundary.capabilities import Embedder, GenerationParams, TextGenerator
from librarian.boundary.model_handle import ExclusiveModelHandle
from librarian.configs import Settings, get_settings
from librarian.core.generation.discussion import DiscussionTutor
from librarian.core.generation.orchestrator import GenerationOrchestrator
from librarian.core.generation.retry import RetryController
from librarian.core.generation.validator import ArtifactValidator
from librarian.core.training.checkpoints import CheckpointStore
from librarian.core.training.dataset import split_training_data
from librarian.core.training.early_stopping import EarlyStoppingController
from librarian.observability.logger import configure_logging


@dataclass
class Pipeline:
    """Wired pipeline components sharing one model handle."""

    settings: Settings
    model_handle: ExclusiveModelHandle
    chunker: ParagraphChunker
    indexer: CorpusIndexer
    search: HybridSearchService
    retry_controller: RetryController
    study: StudySetService
    tutor: DiscussionTutor
    answers: AnswerService


def configure_observability(settings: Settings | None = None) -> str:
    """
    Configure root logging from settings.

    Args:
        settings: Application settings (environment-loaded when omitted)

    Returns:
        str: Level that was applied
    """
    settings = settings or get_settings()
    level = settings.effective_log_level
    configure_logging(level)
    return level


def build_retry_controller(
    model_handle: ExclusiveModelHandle,
    settings: Settings,
    rng: random.Random | None = None,
) -> RetryController:
    """
    Build the generation retry controller from settings.

    Args:
        model_handle: Shared model handle
        settings: Application settings
        rng: Random source for quiz option shuffling

    Returns:
        RetryController: Configured controller
    """
    generation = settings.generation
    orchestrator = GenerationOrchestrator(
        model_handle,
        validator=ArtifactValidator(min_answer_chars=generation.min_answer_chars),
        max_prompt_chars=generation.max_prompt_chars,
    )
    return RetryController(
        orchestrator,
        max_attempts=generation.max_attempts,
        candidates_per_attempt=generation.candidates_per_attempt,
        include_feedback=generation.include_feedback,
        timeout_seconds=generation.timeout_seconds,
        rng=rng,
    )


def build_pipeline(
    embedder: Embedder,
    generator: TextGenerator,
    settings: Settings | None = None,
    rng: random.Random | None = None,
) -> Pipeline:
    """
    Assemble every pipeline component.

    Args:
        embedder: Embedding capability
        generator: Text generation capability
        settings: Application settings (environment-loaded when omitted)
        rng: Random source for option shuffling

    Returns:
        Pipeline: Wired components
    """
    settings = settings or get_settings()
    generation = settings.generation
    handle = ExclusiveModelHandle(embedder, generator)
    search = HybridSearchService(handle, settings.retrieval)
    retry_controller = build_retry_controller(handle, settings, rng)
    tutor = DiscussionTutor(
        handle,
        quiz_params=GenerationParams(
            max_tokens=generation.discussion_max_tokens,
            temperature=generation.discussion_temperature,
        ),
        open_ended_params=GenerationParams(
            max_tokens=generation.open_ended_discussion_max_tokens,
            temperature=generation.open_ended_discussion_temperature,
        ),
    )
    answers = AnswerService(
        handle,
        search,
        params=GenerationParams(max_tokens=generation.answer_max_tokens, temperature=generation.answer_temperature),
        default_top_k=settings.retrieval.top_k,
    )

    return Pipeline(
        settings=settings,
        model_handle=handle,
        chunker=ParagraphChunker(settings.retrieval.chunk_target_words),
        indexer=CorpusIndexer(handle, settings.retrieval.embedding_concurrency),
        search=search,
        retry_controller=retry_controller,
        study=StudySetService(retry_controller, search, generation),
        tutor=tutor,
        answers=answers,
    )


def build_early_stopping(
    checkpoints: CheckpointStore,
    settings: Settings | None = None,
) -> EarlyStoppingController:
    """Build an early-stopping controller from training settings."""
    settings = settings or get_settings()
    return EarlyStoppingController(
        checkpoints,
        patience=settings.training.patience,
        epsilon=settings.training.epsilon,
    )


def build_dataset_split(
    input_path: str | Path,
    train_path: str | Path,
    valid_path: str | Path,
    settings: Settings | None = None,
    seed: int | None = None,
) -> tuple[int, int]:
    """Split exported training data using the configured validation ratio."""
    settings = settings or get_settings()
    return split_training_data(
        input_path,
        train_path,
        valid_path,
        validation_ratio=settings.training.validation_ratio,
        seed=seed,
    )
