"""Application configuration with Pydantic Settings.

This module provides centralized configuration management using pydantic-settings.
Settings are loaded from environment variables and .env files.

Examples:
    >>> from filestore.config import settings
    >>> settings.FILES_PATH
    './data/files'

    >>> settings.MAX_CONTENT_BYTES
    67108864

Tests:
    - tests/unit/test_config.py::TestSettings
"""

import logging
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Payload ceiling for a single stored file (64 MiB)
DEFAULT_MAX_CONTENT_BYTES = 64 * 1024 * 1024

# Ceiling for short string parameters (path, name, type)
DEFAULT_MAX_PARAM_LENGTH = 255


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables and .env file.

    Attributes:
        DATABASE_URL: Database connection string (SQLite or PostgreSQL)
        FILES_PATH: Base directory holding stored file bytes
        MAX_CONTENT_BYTES: Largest accepted payload
        MAX_PARAM_LENGTH: Longest accepted path/name/type parameter
        ENVIRONMENT: Deployment environment
        DEBUG: Enables SQL echo and interactive API docs
        LOG_LEVEL: Root logging level
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./filestore.db",
        description="Database connection string",
    )

    # Blob storage
    FILES_PATH: str = Field(
        default="./data/files",
        description="Base directory for stored files",
    )

    # Request limits
    MAX_CONTENT_BYTES: int = Field(
        default=DEFAULT_MAX_CONTENT_BYTES,
        description="Maximum payload size in bytes",
        ge=1,
    )
    MAX_PARAM_LENGTH: int = Field(
        default=DEFAULT_MAX_PARAM_LENGTH,
        description="Maximum length of path, name and type parameters",
        ge=1,
    )

    # Application Settings
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL format."""
        valid_prefixes = ("sqlite", "postgresql", "postgres")
        if not any(v.startswith(prefix) for prefix in valid_prefixes):
            raise ValueError(
                f"DATABASE_URL must start with one of: {valid_prefixes}"
            )
        return v

    @field_validator("FILES_PATH")
    @classmethod
    def validate_files_path(cls, v: str) -> str:
        """Reject a blank files directory."""
        if not v.strip():
            raise ValueError("FILES_PATH must not be empty")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the logging level name."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database."""
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: The application settings.

    Examples:
        >>> settings = get_settings()
        >>> settings.MAX_PARAM_LENGTH
        255
    """
    return Settings()


# Global settings instance for convenience
settings = get_settings()
