"""
Training loop driver.

Feeds the records produced by a training step into the early-stopping
controller and stops pulling records as soon as it says stop. The step
itself (the fine-tuning runtime) is an external collaborator; it only has
to yield TrainingProgress records.

Dependencies: librarian.core.training.early_stopping
System role: Connects a training runtime to early stopping
"""

import logging
from typing import Iterable

from librarian.core.training.early_stopping import EarlyStoppingController
from librarian.models.training import TrainingDecision, TrainingProgress, TrainingRunState

logger = logging.getLogger(__name__)


def run_training(
    steps: Iterable[TrainingProgress],
    controller: EarlyStoppingController,
) -> TrainingRunState:
    """
    Drive a training run to completion or early stop.

    The step iterator is closed when the controller stops the run, so a
    generator-based runtime gets a chance to clean up.

    Args:
        steps: Progress records from the training runtime
        controller: Early-stopping controller

    Returns:
        TrainingRunState: Final run state (phase is always STOPPED)
    """
    iterator = iter(steps)
    try:
        for progress in iterator:
            if controller.on_progress(progress) is TrainingDecision.STOP:
                break
    finally:
        close = getattr(iterator, "close", None)
        if close is not None:
            close()

    state = controller.finish()
    logger.info(
        f"{__name__}:run_training - Finished at iteration {state.iteration} "
        f"({state.stop_reason.value}), best iteration {state.best_iteration}"
    )
    return state
