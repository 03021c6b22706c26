"""
Fine-tuning support.

Early stopping over structured progress records, checkpoint stores and
training dataset export.
"""

from librarian.core.training.checkpoints import (
    CheckpointStore,
    FileCheckpointStore,
    InMemoryCheckpointStore,
)
from librarian.core.training.dataset import (
    export_training_examples,
    split_training_data,
    validate_training_data,
)
from librarian.core.training.early_stopping import EarlyStoppingController
from librarian.core.training.trainer import run_training

__all__ = [
    "CheckpointStore",
    "EarlyStoppingController",
    "FileCheckpointStore",
    "InMemoryCheckpointStore",
    "export_training_examples",
    "run_training",
    "split_training_data",
    "validate_training_data",
]
