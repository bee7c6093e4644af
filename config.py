"""
Configuration settings for the factdrill practice engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///factdrill.db",
        description="SQLAlchemy connection string (SQLite or PostgreSQL)",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Calendar
    # ========================================
    timezone: str = Field(
        default="Europe/Brussels",
        description="IANA timezone used to decide what 'today' is for due dates",
    )

    # ========================================
    # Question Generation
    # ========================================
    default_tables: list[int] = Field(
        default=[1, 2, 3, 4, 5, 8, 10],
        description="Tables offered when a session does not name its own",
    )
    default_question_count: int = Field(
        default=20,
        description="Questions per session",
    )
    default_time_per_question: float = Field(
        default=60.0,
        description="Seconds allowed per question",
    )
    max_question_count: int = Field(
        default=100,
        description="Upper bound on questions per session",
    )
    generator_max_attempts: int = Field(
        default=1000,
        description="Weighted redraws allowed before duplicates are accepted",
    )

    # ========================================
    # Spaced Repetition (fixed ladder)
    # ========================================
    srs_ladder_days: list[int] = Field(
        default=[1, 2, 3, 4, 7, 14, 30],
        description="Review intervals in days, ascending",
    )
    srs_learning_buffer: int = Field(
        default=2,
        description="Correct answers needed on the first rung before promotion",
    )

    # ========================================
    # Weak Facts / Adaptive Sessions
    # ========================================
    weak_fact_min_seen: int = Field(
        default=2,
        description="Attempts needed before a fact is ranked",
    )
    weak_fact_min_count: int = Field(
        default=5,
        description="Ranked facts needed before adaptive sessions are offered",
    )
    weak_fact_limit: int = Field(
        default=30,
        description="Weak facts fetched for an adaptive session",
    )
    adaptive_weak_ratio: float = Field(
        default=0.7,
        description="Share of an adaptive session drawn from weak facts",
    )

    @field_validator("srs_ladder_days")
    @classmethod
    def _ladder_ascending(cls, value: list[int]) -> list[int]:
        if not value:
            raise ValueError("srs_ladder_days must not be empty")
        if value[0] < 1:
            raise ValueError("srs_ladder_days must start at 1 day or more")
        if any(b <= a for a, b in zip(value, value[1:])):
            raise ValueError("srs_ladder_days must be strictly ascending")
        return value

    @field_validator("adaptive_weak_ratio")
    @classmethod
    def _ratio_bounds(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("adaptive_weak_ratio must be between 0 and 1")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
