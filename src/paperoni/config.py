# ABOUTME: Centralized configuration using Pydantic Settings.
# ABOUTME: Loads download, extraction and logging defaults from PAPERONI_* env vars and .env.

import tempfile
from functools import lru_cache
from pathlib import Path

from pydantic import Field, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PAPERONI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # HTTP
    max_conn: PositiveInt = 8
    image_max_conn: PositiveInt = 10
    http_timeout: float = 30.0
    max_redirects: int = 5
    user_agent: str = (
        "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"
    )

    # Storage
    image_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".paperoni" / "logs")

    # Extraction
    char_threshold: int = 500
    top_candidates: int = 5


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
