"""
Fine-tuning progress models.

TrainingProgress is the structured record a training step emits; the
early-stopping controller consumes it directly instead of parsing log text.
TrainingRunState lives for one fine-tuning invocation only.

Dependencies: pydantic, dataclasses
System role: Training state machine data structures
"""

import math
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TrainingPhase(str, Enum):
    """States of the early-stopping state machine."""

    TRAINING = "training"
    IMPROVED = "improved"
    STALLED = "stalled"
    STOPPED = "stopped"


class StopReason(str, Enum):
    """Why a training run ended."""

    PATIENCE_EXHAUSTED = "patience_exhausted"
    EXTERNAL_SIGNAL = "external_signal"
    COMPLETED = "completed"


class TrainingDecision(str, Enum):
    """Instruction returned to the training loop after each record."""

    CONTINUE = "continue"
    STOP = "stop"


class TrainingProgress(BaseModel):
    """One record emitted by the training step."""

    model_config = ConfigDict(frozen=True)

    iteration: int = Field(ge=0)
    training_loss: float
    validation_loss: float | None = None

    @property
    def is_evaluation(self) -> bool:
        return self.validation_loss is not None


class CheckpointHandle(BaseModel):
    """Opaque reference to a persisted set of weights."""

    model_config = ConfigDict(frozen=True)

    iteration: int
    location: str | None = None


class TrainingReport(BaseModel):
    """Progress snapshot published to observers."""

    iteration: int
    training_loss: float
    validation_loss: float | None
    best_loss: float
    patience_counter: int
    phase: TrainingPhase


@dataclass
class TrainingRunState:
    """Mutable state owned by the early-stopping controller."""

    iteration: int = 0
    best_loss: float = math.inf
    patience_counter: int = 0
    best_checkpoint: CheckpointHandle | None = None
    phase: TrainingPhase = TrainingPhase.TRAINING
    stop_reason: StopReason | None = None
    restored: bool = False

    @property
    def best_iteration(self) -> int | None:
        return self.best_checkpoint.iteration if self.best_checkpoint else None
