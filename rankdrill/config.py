"""
Configuration settings for rankdrill.

Uses Pydantic Settings for environment variable management with .env file support.
Every field can be overridden with a ``RANKDRILL_`` prefixed environment variable.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RANKDRILL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Files
    # ========================================
    sets_dir: Path = Field(
        default=Path("sets"),
        description="Directory tree containing question-set JSON files",
    )
    progress_file: Path = Field(
        default=Path("user.json"),
        description="Progress file holding ranks and iteration resume state",
    )
    load_workers: int = Field(
        default=8,
        ge=1,
        description="Threads used to load set files concurrently",
    )

    # ========================================
    # Grading
    # ========================================
    near_miss_distance: int = Field(
        default=3,
        ge=1,
        description="Free-response answers closer than this edit distance ask for confirmation",
    )
    free_response_rank: int = Field(
        default=2,
        ge=0,
        description="Lowest rank that is quizzed with free-response instead of multiple choice",
    )

    # ========================================
    # Presentation
    # ========================================
    feedback_delay: float = Field(
        default=0.4,
        ge=0.0,
        description="Seconds to pause after showing feedback",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path (None for stderr only)",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
