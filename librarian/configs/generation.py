"""
Generation configuration settings.

Retry budget, candidate count, prompt size bound and per-task sampling
parameters for the generate -> validate -> retry loop.

Dependencies: pydantic, pydantic_settings
System role: Validated generation configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GenerationSettings(BaseSettings):
    """Validated generation configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LIBRARIAN_GENERATION_",
        case_sensitive=False,
        extra="ignore",
    )

    max_attempts: int = Field(default=3, ge=1, description="Attempts per chunk before giving up")
    candidates_per_attempt: int = Field(
        default=1,
        ge=1,
        description="Candidates generated per attempt (best one is kept)",
    )
    include_feedback: bool = Field(
        default=True,
        description="Append previous failure reasons to the next prompt",
    )
    timeout_seconds: float | None = Field(
        default=None,
        gt=0.0,
        description="Stop retrying once this many seconds have elapsed",
    )
    max_prompt_chars: int = Field(
        default=800,
        gt=0,
        description="Maximum characters of chunk text placed in a prompt",
    )
    min_answer_chars: int = Field(
        default=20,
        ge=1,
        description="Minimum length of a flashcard / open-ended answer",
    )

    quiz_max_tokens: int = Field(default=512, gt=0)
    quiz_temperature: float = Field(default=0.8, ge=0.0, le=1.0)
    flashcard_max_tokens: int = Field(default=1024, gt=0)
    flashcard_temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    open_ended_max_tokens: int = Field(default=1024, gt=0)
    open_ended_temperature: float = Field(default=0.8, ge=0.0, le=1.0)
    discussion_max_tokens: int = Field(default=512, gt=0)
    discussion_temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    open_ended_discussion_max_tokens: int = Field(default=1024, gt=0)
    open_ended_discussion_temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    answer_max_tokens: int = Field(default=512, gt=0)
    answer_temperature: float = Field(default=0.7, ge=0.0, le=1.0)
