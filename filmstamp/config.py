"""filmstamp configuration module.

Ambient settings (logging, encoder quality) come from ``FILMSTAMP_*``
environment variables via pydantic-settings. The per-run pipeline options
come from the command line and are validated by ``PipelineConfig``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from the environment and an optional .env file."""

    model_config = SettingsConfigDict(
        env_prefix="FILMSTAMP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    jpeg_quality: int = Field(
        default=95,
        description="Encoder quality for lossy output formats (JPEG, WebP)",
        ge=1,
        le=95,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            raise ValueError(f"log_level must be one of {valid}, got '{v}'")
        return upper


class PipelineConfig(BaseModel):
    """Options for a single pipeline run.

    ``annotate=False`` is the inspection variant: the run stops once the
    timestamp is formatted and no output path is involved.
    """

    input_path: Path
    output_path: Optional[Path] = None
    annotate: bool = True
    quality: int = Field(default=95, ge=1, le=95)

    @model_validator(mode="after")
    def check_output_path(self) -> PipelineConfig:
        if self.annotate and self.output_path is None:
            raise ValueError("output_path is required when annotate is enabled")
        return self


def get_settings(**overrides: str) -> Settings:
    """Create a Settings instance with optional overrides.

    Args:
        **overrides: Key-value pairs to override env/defaults.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If any value fails validation.
    """
    return Settings(**overrides)
