"""
proofspec Configuration

Centralized configuration using Pydantic Settings.
All configuration is loaded from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Where declarative configuration lives and who is collecting proof."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="", extra="ignore"
    )

    config_dir: Path = Field(default=Path("json"), alias="PROOFSPEC_CONFIG_DIR")
    connector_name: str = Field(default="proofspec", alias="PROOFSPEC_CONNECTOR_NAME")
    integration_type: str = Field(default="", alias="INTEGRATION_TYPE")

    @field_validator("config_dir", mode="before")
    @classmethod
    def resolve_path(cls, v: str | Path) -> Path:
        """Resolve path and expand user."""
        return Path(v).expanduser().resolve()


class TokenSettings(BaseSettings):
    """Placeholder resolution limits."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="", extra="ignore"
    )

    # Upper bound on rescan passes; turns cyclic templates into an error
    max_passes: int = Field(default=32, ge=1, le=1000, alias="PROOFSPEC_TOKEN_MAX_PASSES")


class PaginationSettings(BaseSettings):
    """Guards for paginated data source loops."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="", extra="ignore"
    )

    max_pages: int = Field(default=500, ge=1, alias="PROOFSPEC_MAX_PAGES")


class LocalizationSettings(BaseSettings):
    """Fallbacks used when the user context omits localization values."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="", extra="ignore"
    )

    default_time_zone: str = Field(default="UTC", alias="PROOFSPEC_DEFAULT_TIME_ZONE")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="", extra="ignore"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    log_format: Literal["json", "text"] = Field(default="json", alias="LOG_FORMAT")


class FeatureFlags(BaseSettings):
    """Feature flags for optional functionality."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="", extra="ignore"
    )

    debug: bool = Field(default=False, alias="PROOFSPEC_DEBUG")


class Settings(BaseSettings):
    """
    Main proofspec settings aggregator.

    Usage:
        from proofspec.config import get_settings
        settings = get_settings()
        print(settings.engine.config_dir)
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Sub-settings (composed)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    tokens: TokenSettings = Field(default_factory=TokenSettings)
    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    localization: LocalizationSettings = Field(default_factory=LocalizationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    features: FeatureFlags = Field(default_factory=FeatureFlags)

    @property
    def trace_path(self) -> Path:
        """Directory that receives exported traces in debug mode."""
        return self.engine.config_dir.parent / "traces"


# Singleton pattern for settings
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None
