"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from ``RESOURCE_KIT_``-prefixed environment variables
with support for .env files, type validation, and sensible defaults. All
settings are frozen and immutable after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import FileExtensionStr, LoopCount, UnitInterval


class PlayerSettings(BaseModel):
    """Segment player configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    default_volume: UnitInterval = Field(
        default=1.0, validation_alias=AliasChoices("default_volume", "volume")
    )
    number_of_loops: LoopCount = Field(
        default=0, validation_alias=AliasChoices("number_of_loops", "loops")
    )
    enforce_control_thread: bool = True


class ResourceSettings(BaseModel):
    """Resource lookup configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    root: Path = Field(
        default=Path("resources"), validation_alias=AliasChoices("root", "resource_root")
    )
    audio_extension: FileExtensionStr = "mp3"
    manifest_extension: FileExtensionStr = "json"

    @field_validator("audio_extension", "manifest_extension", mode="before")
    @classmethod
    def strip_leading_dot(cls, v: object) -> object:
        """Accept extensions written as ``.mp3``."""
        if isinstance(v, str):
            return v.lstrip(".")
        return v


class Settings(BaseSettings):
    """Application settings container.

    Environment variable naming:
    - RESOURCE_KIT_ENVIRONMENT, RESOURCE_KIT_DEBUG, RESOURCE_KIT_LOG_LEVEL (top-level)
    - RESOURCE_KIT_PLAYER__DEFAULT_VOLUME, RESOURCE_KIT_PLAYER__NUMBER_OF_LOOPS, ...
    - RESOURCE_KIT_RESOURCES__ROOT, RESOURCE_KIT_RESOURCES__AUDIO_EXTENSION, ...
    """

    model_config = SettingsConfigDict(
        env_prefix="RESOURCE_KIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    player: PlayerSettings = Field(default_factory=PlayerSettings)
    resources: ResourceSettings = Field(default_factory=ResourceSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
