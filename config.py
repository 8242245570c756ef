"""
Configuration settings for the Foundgarten practice engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path.home() / ".foundgarten"


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
        default=f"sqlite+aiosqlite:///{DEFAULT_DATA_DIR / 'statistics.db'}",
        description="Statistics database connection string (SQLite or PostgreSQL)",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements to the log",
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
    # Round defaults
    # ========================================
    # Used when the settings collaborator has not stored a configuration yet.
    default_round_size: int = Field(
        default=15,
        ge=1,
        description="Items per adaptive round",
    )
    default_variant_filter: str = Field(
        default="both",
        description="Variant filter ('both', 'uppercase', 'lowercase', ...)",
    )
    default_difficulty: str = Field(
        default="standard",
        description="Difficulty tier: relaxed, standard or intensive",
    )

    def default_round_configuration(self):
        """Build the RoundConfiguration described by these settings."""
        from src.core.models import RoundConfiguration

        return RoundConfiguration(
            round_size=self.default_round_size,
            variant_filter=self.default_variant_filter,
            difficulty=self.default_difficulty,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
