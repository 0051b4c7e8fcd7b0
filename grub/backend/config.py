"""
Configuration and settings for the meal planner backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from grub.models.gemini import DEFAULT_MODEL


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Database (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None)

    # LLM / Gemini
    gemini_api_key: Optional[str] = Field(default=None)
    default_model: str = Field(default=DEFAULT_MODEL)
    completion_timeout_seconds: Optional[float] = Field(default=120.0, gt=0)
    # No automatic retry unless configured.
    completion_max_retries: int = Field(default=0, ge=0, le=5)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="GRUB_USE_IN_MEMORY_BACKENDS"
    )

    cors_allow_origins: list[str] = Field(default=["*"])
    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
