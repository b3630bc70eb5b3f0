"""
Configuration settings for the cadence review board.

Uses Pydantic Settings for environment variable management with .env file support.
Every setting can be overridden with a CADENCE_-prefixed environment variable.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CADENCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".cadence",
        description="Directory for the local board database",
    )
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL; defaults to a SQLite file in data_dir",
    )
    sql_echo: bool = Field(
        default=False,
        description="Echo SQL statements (debugging)",
    )

    # ========================================
    # Board
    # ========================================
    user_id: str = Field(
        default="default",
        description="Owner of the board being edited",
    )
    new_items_on_top: bool = Field(
        default=False,
        description="Place newly created items first in their bucket instead of last",
    )

    # ─── Touch gestures ──────────────────────────────────────────────────────
    touch_hold_ms: int = Field(
        default=300,
        ge=0,
        description="Long-press duration before a touch starts a move",
    )
    touch_jitter_px: float = Field(
        default=10.0,
        ge=0,
        description="Finger drift tolerated while waiting for the long-press",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="WARNING",
        description="Minimum level written to stderr by the CLI",
    )

    def get_database_url(self) -> str:
        """Resolve the database URL, falling back to data_dir/board.db."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir.expanduser() / 'board.db'}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
