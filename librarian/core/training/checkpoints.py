"""
Checkpoint stores.

The early-stopping controller saves a checkpoint whenever validation loss
improves and restores the best one when patience runs out. The file store
mirrors the fine-tuning layout on disk: the live adapter weights are copied
to a sibling "best" file and copied back on restore.

Dependencies: shutil, pathlib
System role: Best-checkpoint persistence for early stopping
"""

import logging
import shutil
from pathlib import Path
from typing import Protocol

from librarian.core.exceptions import TrainingError
from librarian.models.training import CheckpointHandle

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS_FILE = "adapters.safetensors"
DEFAULT_BEST_FILE = "adapters-best.safetensors"


class CheckpointStore(Protocol):
    """Saves and restores model weights for the early-stopping controller."""

    def save(self, iteration: int) -> CheckpointHandle:
        ...

    def restore(self, handle: CheckpointHandle) -> None:
        ...


class InMemoryCheckpointStore:
    """
    Checkpoint store that only records which iterations were saved.

    Useful when the training runtime keeps its own weights and only needs to
    be told which checkpoint to reload.
    """

    def __init__(self) -> None:
        self.saved: list[CheckpointHandle] = []
        self.restored: list[CheckpointHandle] = []

    def save(self, iteration: int) -> CheckpointHandle:
        handle = CheckpointHandle(iteration=iteration, location=f"memory://{iteration}")
        self.saved.append(handle)
        return handle

    def restore(self, handle: CheckpointHandle) -> None:
        if handle not in self.saved:
            raise TrainingError("Unknown checkpoint", {"iteration": handle.iteration})
        self.restored.append(handle)


class FileCheckpointStore:
    """Keeps the best adapter weights as a copy next to the live file."""

    def __init__(self, adapter_dir: str | Path, weights_file: str = DEFAULT_WEIGHTS_FILE, best_file: str = DEFAULT_BEST_FILE) -> None:
        """
        Initialize store.

        Args:
            adapter_dir: Directory the trainer writes adapter weights to
            weights_file: Live weights file name
            best_file: Best checkpoint file name
        """
        self.adapter_dir = Path(adapter_dir)
        self.weights_path = self.adapter_dir / weights_file
        self.best_path = self.adapter_dir / best_file

    def save(self, iteration: int) -> CheckpointHandle:
        """
        Copy the live weights to the best checkpoint file.

        Raises:
            TrainingError: When the weights file cannot be copied
        """
        try:
            shutil.copyfile(self.weights_path, self.best_path)
        except OSError as e:
            raise TrainingError(
                f"Failed to save checkpoint: {e}",
                {"iteration": iteration, "path": str(self.weights_path)},
            ) from e

        logger.info(f"{__name__}:save - Saved best checkpoint at iteration {iteration}")
        return CheckpointHandle(iteration=iteration, location=str(self.best_path))

    def restore(self, handle: CheckpointHandle) -> None:
        """
        Copy the best checkpoint back over the live weights.

        Raises:
            TrainingError: When the checkpoint file is missing or unreadable
        """
        source = Path(handle.location) if handle.location else self.best_path
        try:
            shutil.copyfile(source, self.weights_path)
        except OSError as e:
            raise TrainingError(
                f"Failed to restore checkpoint: {e}",
                {"iteration": handle.iteration, "path": str(source)},
            ) from e

        logger.info(f"{__name__}:restore - Restored checkpoint from iteration {handle.iteration}")
