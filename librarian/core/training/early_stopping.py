"""
Early-stopping state machine.

Consumes structured training progress records and decides after each one
whether training should continue:

    TRAINING -> IMPROVED | STALLED -> TRAINING | STOPPED

An evaluation improves when ``validation_loss < best_loss - epsilon``. An
improvement saves a checkpoint and resets patience; otherwise the patience
counter grows, and once it reaches ``patience`` the best checkpoint is
restored and training stops. An external stop request ends the run at the
next evaluation without restoring anything.

Dependencies: threading, librarian.core.training.checkpoints
System role: Patience-based early stopping with best-checkpoint restore
"""

import logging
import threading
from typing import Callable

from librarian.core.training.checkpoints import CheckpointStore
from librarian.models.training import (
    StopReason,
    TrainingDecision,
    TrainingPhase,
    TrainingProgress,
    TrainingReport,
    TrainingRunState,
)

logger = logging.getLogger(__name__)

DEFAULT_PATIENCE = 3
DEFAULT_EPSILON = 0.001


class EarlyStoppingController:
    """Tracks best validation loss and decides when to stop training."""

    def __init__(
        self,
        checkpoints: CheckpointStore,
        patience: int = DEFAULT_PATIENCE,
        epsilon: float = DEFAULT_EPSILON,
        on_report: Callable[[TrainingReport], None] | None = None,
    ) -> None:
        """
        Initialize controller.

        Args:
            checkpoints: Store used to save and restore the best weights
            patience: Non-improving evaluations tolerated before stopping
            epsilon: Minimum loss decrease that counts as an improvement
            on_report: Receives a TrainingReport after every record
        """
        if patience < 1:
            raise ValueError("patience must be at least 1")
        if epsilon < 0:
            raise ValueError("epsilon must be non-negative")

        self.checkpoints = checkpoints
        self.patience = patience
        self.epsilon = epsilon
        self.on_report = on_report
        self.state = TrainingRunState()
        self._stop_requested = threading.Event()

    @property
    def stopped(self) -> bool:
        return self.state.phase is TrainingPhase.STOPPED

    def request_stop(self) -> None:
        """Ask the run to stop at the next evaluation. Safe from any thread."""
        self._stop_requested.set()

    def on_progress(self, progress: TrainingProgress) -> TrainingDecision:
        """
        Handle one progress record.

        Records without a validation loss only advance the iteration
        counter; evaluations run the state machine.

        Args:
            progress: Record emitted by the training step

        Returns:
            TrainingDecision: Whether the training loop should continue
        """
        if self.stopped:
            return TrainingDecision.STOP

        self.state.iteration = progress.iteration
        if not progress.is_evaluation:
            self._publish(progress)
            return TrainingDecision.CONTINUE

        return self.on_evaluation(progress)

    def on_evaluation(self, progress: TrainingProgress) -> TrainingDecision:
        """
        Run one evaluation step of the state machine.

        Raises:
            ValueError: When the record carries no validation loss
            TrainingError: When saving or restoring a checkpoint fails
        """
        if progress.validation_loss is None:
            raise ValueError("Evaluation record requires a validation loss")
        if self.stopped:
            return TrainingDecision.STOP

        state = self.state
        state.iteration = progress.iteration
        loss = progress.validation_loss

        if self._stop_requested.is_set():
            state.phase = TrainingPhase.STOPPED
            state.stop_reason = StopReason.EXTERNAL_SIGNAL
            logger.info(f"{__name__}:on_evaluation - Stop requested at iteration {state.iteration}")
            self._publish(progress)
            return TrainingDecision.STOP

        if loss < state.best_loss - self.epsilon:
            state.best_checkpoint = self.checkpoints.save(progress.iteration)
            state.best_loss = loss
            state.patience_counter = 0
            state.phase = TrainingPhase.IMPROVED
            logger.info(
                f"{__name__}:on_evaluation - Iteration {progress.iteration}: "
                f"val loss improved to {loss:.4f}"
            )
            self._publish(progress)
            state.phase = TrainingPhase.TRAINING
            return TrainingDecision.CONTINUE

        state.patience_counter += 1
        state.phase = TrainingPhase.STALLED
        logger.info(
            f"{__name__}:on_evaluation - Iteration {progress.iteration}: val loss {loss:.4f} "
            f"no better than {state.best_loss:.4f} ({state.patience_counter}/{self.patience})"
        )

        if state.patience_counter >= self.patience:
            if state.best_checkpoint is not None:
                self.checkpoints.restore(state.best_checkpoint)
                state.restored = True
            state.phase = TrainingPhase.STOPPED
            state.stop_reason = StopReason.PATIENCE_EXHAUSTED
            logger.info(
                f"{__name__}:on_evaluation - Early stopping at iteration {progress.iteration}, "
                f"best iteration {state.best_iteration} (loss {state.best_loss:.4f})"
            )
            self._publish(progress)
            return TrainingDecision.STOP

        self._publish(progress)
        state.phase = TrainingPhase.TRAINING
        return TrainingDecision.CONTINUE

    def finish(self) -> TrainingRunState:
        """Mark a run that ran out of steps as completed and return its state."""
        if not self.stopped:
            self.state.phase = TrainingPhase.STOPPED
            self.state.stop_reason = StopReason.COMPLETED
        return self.state

    def _publish(self, progress: TrainingProgress) -> None:
        if self.on_report is None:
            return
        self.on_report(
            TrainingReport(
                iteration=progress.iteration,
                training_loss=progress.training_loss,
                validation_loss=progress.validation_loss,
                best_loss=self.state.best_loss,
                patience_counter=self.state.patience_counter,
                phase=self.state.phase,
            )
        )
