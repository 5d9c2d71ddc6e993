"""
Application configuration using Pydantic Settings.

Automatically loads environment variables from .env files.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI credential, only checked on the first parse attempt
    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1"

    # Preview rendering
    pdf_preview_scale: float = 1.5

    # Upload limits
    max_upload_bytes: int = 20 * 1024 * 1024

    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration loaded from environment.
    """
    return Settings()
