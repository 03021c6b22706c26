"""
Base configuration settings.

Provides common configuration inherited by all specific config modules.
Handles shared defaults such as the root log level.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict
from pydantic import Field


class BaseSettings(PydanticBaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LIBRARIAN_",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode (forces DEBUG logging)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @property
    def effective_log_level(self) -> str:
        """Log level to configure, DEBUG whenever debug mode is on."""
        return "DEBUG" if self.debug else self.log_level.upper()
