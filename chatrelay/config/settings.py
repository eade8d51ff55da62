"""
Application settings and configuration management.

Uses Pydantic Settings for validation and environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BotSettings(BaseSettings):
    """Discord bot configuration."""

    name: str = Field(default="ChatRelay", description="Bot display name")
    token: str = Field(default="", description="Discord bot token")
    allowed_channel_ids: list[int] = Field(
        default_factory=list,
        description="If non-empty, bot only responds in these channel IDs. "
                    "Set via BOT__ALLOWED_CHANNEL_IDS='[123456,789012]'",
    )
    history_seed_size: int = Field(
        default=5,
        ge=0,
        description="Messages fetched before the trigger (or its reply target) "
                    "to seed the conversation history",
    )
    typing_interval: float = Field(
        default=5.0,
        gt=0,
        description="Seconds between typing indicator refreshes while a request is in flight",
    )
    reply_chunk_size: int = Field(
        default=2000,
        gt=0,
        description="Maximum characters per outbound Discord message",
    )
    max_attachments: int = Field(
        default=10,
        ge=0,
        description="Attachments beyond this count are dropped from each message",
    )

    model_config = SettingsConfigDict(env_prefix="BOT_")


class LLMSettings(BaseSettings):
    """Completion service configuration."""

    selector_model: str = Field(
        default="gpt-5-nano",
        description="LiteLLM model string used for the model-tier classification call",
    )
    max_tokens: int | None = Field(
        default=None,
        description="Maximum tokens in a response. None leaves the provider default.",
    )
    api_key: str = Field(
        default="",
        description="API key for the model's provider. When empty, LiteLLM falls back "
                    "to the provider's own environment variable (e.g. OPENAI_API_KEY).",
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        description="Completion attempts per response. The last attempt never offers tools.",
    )

    model_config = SettingsConfigDict(env_prefix="LLM_")


class Settings(BaseSettings):
    """Main application settings."""

    # Environment
    environment: Literal["development", "production"] = Field(
        default="development", description="Deployment environment"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_file: Path | None = Field(default=None, description="Log file path")

    # Sub-configurations
    bot: BotSettings = Field(default_factory=BotSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings(env_file: str | Path | None = None) -> Settings:
    """
    Load settings from file and environment.

    Args:
        env_file: Path to .env file (optional)

    Returns:
        Loaded settings instance
    """
    global _settings
    if env_file:
        _settings = Settings(_env_file=env_file)
    else:
        _settings = Settings()
    return _settings
