"""
Configuration Management for AI Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini generative AI configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )

    # Text models
    summary_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used for the spending summary"
    )
    chat_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used for the financial assistant chat"
    )
    analysis_model: str = Field(
        default="gemini-flash-lite-latest",
        description="Fast model used for free-text analysis"
    )
    detailed_analysis_model: str = Field(
        default="gemini-2.5-pro",
        description="Slower, more thorough model for detailed analysis"
    )
    thinking_budget: int = Field(
        default=32768,
        ge=0,
        description="Thinking token budget for detailed analysis"
    )

    # Image models
    image_edit_model: str = Field(
        default="gemini-2.5-flash-image",
        description="Model used to edit uploaded images"
    )
    image_generation_model: str = Field(
        default="imagen-4.0-generate-001",
        description="Model used to generate images from a prompt"
    )

    chat_system_instruction: str = Field(
        default=(
            "You are a friendly and helpful financial assistant for an expense "
            "tracking app. Provide concise and clear answers."
        ),
        description="System instruction for the chat assistant"
    )


class StorageSettings(BaseSettings):
    """Local key-value persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: str = Field(
        default=".expense_tracker",
        description="Directory holding one JSON file per stored collection"
    )
    in_memory: bool = Field(
        default=False,
        description="Keep data in memory only (nothing written to disk)"
    )

    @field_validator('data_dir')
    @classmethod
    def validate_data_dir(cls, v: str) -> str:
        """Reject a data directory that points at an existing file."""
        path = Path(v).expanduser()
        if path.exists() and not path.is_dir():
            raise ValueError(f"Storage data_dir is not a directory: {v}")
        return v

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the structured logger"
    )

    # Categories
    preset_categories: str = Field(
        default="Food,Subscriptions,Transportation",
        description="Comma-separated list of built-in categories, in display order"
    )
    allow_preset_rename: bool = Field(
        default=True,
        description="Whether preset categories may be renamed"
    )

    # Display
    currency_symbol: str = Field(
        default="₦",
        description="Currency symbol used when formatting amounts"
    )

    # AI features
    min_expenses_for_summary: int = Field(
        default=3,
        ge=1,
        description="Minimum number of expenses before a summary can be generated"
    )

    # File upload limits
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum upload file size in MB"
    )
    supported_image_formats: str = Field(
        default="image/jpeg,image/png,image/webp",
        description="Comma-separated list of accepted image MIME types"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def preset_categories_list(self) -> list[str]:
        """Get preset categories as a list, dropping blanks and repeats."""
        presets: list[str] = []
        for label in self.preset_categories.split(","):
            label = label.strip()
            if label and label not in presets:
                presets.append(label)
        return presets

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported MIME types as a list."""
        return [fmt.strip().lower() for fmt in self.supported_image_formats.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration.
    # The tracker works without a Gemini key; only the AI pages need it.

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, Optional[object]]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    {setting_name}_error entry for each failure.
    Useful for startup checks.
    """
    results: dict[str, Optional[object]] = {}

    settings = get_settings()

    for name in ("gemini", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
