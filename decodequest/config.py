"""
Configuration settings for the decodequest engine and CLI.

Uses Pydantic Settings for environment variable management with .env file support.
Engine constants (score weights, priority terms, smoothing factor) live
in their own modules.
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
        env_prefix="DECODEQUEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum level for the stderr log sink",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional rotating log file",
    )

    # ========================================
    # Sessions
    # ========================================
    default_session_minutes: int = Field(
        default=6,
        ge=1,
        description="Session length when neither caller nor profile supplies one",
    )

    # ========================================
    # Storage hand-off caps
    # ========================================
    max_recent_attempts: int = Field(
        default=200,
        ge=0,
        description="Attempts kept in stored progress",
    )
    max_session_history: int = Field(
        default=30,
        ge=0,
        description="Session summaries kept in stored progress",
    )

    # ========================================
    # Data sources (CLI)
    # ========================================
    profile_path: Path | None = Field(
        default=None,
        description="Learner profile JSON",
    )
    content_path: Path | None = Field(
        default=None,
        description="Content bank JSON",
    )

    # ========================================
    # Randomness
    # ========================================
    random_seed: int | None = Field(
        default=None,
        description="Seed for reproducible mission/selection shuffles",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
