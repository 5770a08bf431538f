"""
Configuration settings for LingoPop.

Uses Pydantic Settings for environment variable management with .env file support.
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
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Gemini (Oracle)
    # ========================================
    gemini_api_key: str | None = Field(
        default=None,
        description="Google Generative AI (Gemini) API key",
    )
    text_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used for lookups, scenarios, replies and grading",
    )
    image_model: str = Field(
        default="gemini-2.5-flash-image",
        description="Model used for mnemonic concept images",
    )
    tts_model: str = Field(
        default="gemini-2.5-flash-preview-tts",
        description="Model used for speech synthesis",
    )
    oracle_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Upper bound for any single Oracle call",
    )
    image_generation_enabled: bool = Field(
        default=True,
        description="Generate a concept image alongside each lookup",
    )

    # ========================================
    # Learner defaults
    # ========================================
    native_language: str = Field(
        default="English",
        description="Learner's native language (display name)",
    )
    target_language: str = Field(
        default="Spanish",
        description="Language being learned (display name)",
    )
    default_voice: Literal["Kore", "Puck", "Charon"] = Field(
        default="Kore",
        description="Prebuilt voice for spoken audio",
    )

    # ========================================
    # Notebook
    # ========================================
    notebook_path: Path = Field(
        default=Path.home() / ".lingopop" / "notebook.json",
        description="Location of the saved-words notebook",
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
        description="Log file path (None for stderr only)",
    )

    def has_ai_configured(self) -> bool:
        """Check if the Gemini Oracle can be used."""
        return bool(self.gemini_api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
