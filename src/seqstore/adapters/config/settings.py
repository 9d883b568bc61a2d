# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Application settings loaded from environment variables and .env files.

Precedence (highest first): explicit constructor arguments, environment
variables (``SEQSTORE_<SECTION>_<FIELD>``), ``.env`` file, defaults.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class StorageSettings(BaseSettings):
    """Backing file and allocator policy."""

    model_config = SettingsConfigDict(
        env_prefix="SEQSTORE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_path: str = Field(
        default="sequences.bin",
        description="Path of the backing file holding packed records",
    )
    shrink_on_release: bool = Field(
        default=True,
        description="Drop a freed range that reaches the end of the file and truncate the file",
    )
    check_invariants: bool = Field(
        default=False,
        description="Validate the free list after every insert and remove (debug)",
    )
    fsync_on_write: bool = Field(
        default=False,
        description="fsync the backing file after every write and resize",
    )

    @field_validator("data_path")
    @classmethod
    def validate_data_path(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("data_path must not be empty")
        return v


class LoggingSettings(BaseSettings):
    """Structured logging output."""

    model_config = SettingsConfigDict(
        env_prefix="SEQSTORE_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = Field(default="INFO", description="Log level name")
    json_output: bool = Field(default=False, description="Render logs as JSON lines")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        normalized = v.strip().upper()
        if normalized not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"level must be one of {sorted(_VALID_LOG_LEVELS)}, got {v!r}"
            )
        return normalized


class Settings(BaseSettings):
    """Aggregate settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the settings singleton.

    Loads configuration from environment variables and the .env file.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from the environment (for tests and the CLI)."""
    global _settings
    _settings = Settings()
    return _settings
