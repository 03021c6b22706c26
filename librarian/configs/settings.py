"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the pipeline
"""

from functools import lru_cache

from pydantic import Field

from librarian.configs.base import BaseSettings
from librarian.configs.generation import GenerationSettings
from librarian.configs.retrieval import RetrievalSettings
from librarian.configs.training import TrainingSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    training: TrainingSettings = Field(default_factory=TrainingSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables are loaded once, on first call.

    Returns:
        Settings: Application settings instance

    Usage:
        from librarian.configs import get_settings
        settings = get_settings()
    """
    return Settings()
