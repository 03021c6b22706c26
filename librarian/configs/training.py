"""
Training configuration settings.

Early-stopping parameters and the validation split used when exporting
fine-tuning data.

Dependencies: pydantic, pydantic_settings
System role: Fine-tuning control configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrainingSettings(BaseSettings):
    """Early stopping and dataset split configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LIBRARIAN_TRAINING_",
        case_sensitive=False,
        extra="ignore",
    )

    patience: int = Field(
        default=3,
        ge=1,
        description="Consecutive non-improving evaluations tolerated before stopping",
    )
    epsilon: float = Field(
        default=0.001,
        ge=0.0,
        description="Minimum validation-loss decrease that counts as an improvement",
    )
    validation_ratio: float = Field(
        default=0.1,
        gt=0.0,
        lt=1.0,
        description="Share of exported examples held out for validation",
    )
