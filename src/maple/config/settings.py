"""Configuration management using Pydantic Settings.

This module provides type-safe configuration management with automatic
environment variable loading and validation.

The configuration is organized into logical groups:
- DatabaseConfig: Database connection settings
- LoggingConfig: Logging levels, files, and debugging options
- PersistenceConfig: Batch commit sizing for bulk saves
- IdentityConfig: Principal used when stamping audit fields
"""

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = "sqlite+pysqlite:///data/maple.db"
    echo: bool = False
    busy_timeout_ms: int = 30000


class LoggingConfig(BaseModel):
    """Logging configuration for console and file output."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_file: Path = Path("maple.log")
    real_time_debug: bool = True


class PersistenceConfig(BaseModel):
    """Bulk save configuration.

    ``batch_threshold`` bounds how many items land in one transaction during a
    collection save. ``batch_commit_policy`` picks where the interval starts:
    ``leading`` commits after item 0, N, 2N... while ``trailing`` commits after
    item N-1, 2N-1...
    """

    batch_threshold: int = Field(default=100, gt=0)
    batch_commit_policy: Literal["leading", "trailing"] = "leading"


class IdentityConfig(BaseModel):
    """Audit identity configuration."""

    # Empty means "resolve from the operating system user"
    principal: str = ""


class Settings(BaseSettings):
    """Main application settings with environment variable support.

    Environment variables can be set using flat naming or nested naming:
    - Flat: DATABASE_URL, CONSOLE_LOG_LEVEL, BATCH_SAVE_THRESHOLD
    - Nested: DATABASE__URL, LOGGING__CONSOLE_LEVEL, PERSISTENCE__BATCH_THRESHOLD

    The .env file is automatically loaded for development convenience.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Nested configuration groups
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    persistence: PersistenceConfig = PersistenceConfig()
    identity: IdentityConfig = IdentityConfig()

    # Top-level settings
    data_dir: Path = Path("data")

    @model_validator(mode="before")
    @classmethod
    def transform_flat_env_vars(cls, data: Any) -> Any:
        """Transform flat environment variables to nested structure.

        Handles flat env vars (DATABASE_URL) and maps them to the nested
        structure expected by the models (database.url).
        """
        if not isinstance(data, dict):
            return data

        transformed: dict[str, dict[str, Any]] = {}

        mappings = {
            "database": {
                "database_url": "url",
                "database_echo": "echo",
                "database_busy_timeout_ms": "busy_timeout_ms",
            },
            "logging": {
                "console_log_level": "console_level",
                "file_log_level": "file_level",
                "log_file": "log_file",
                "log_real_time_debug": "real_time_debug",
            },
            "persistence": {
                "batch_save_threshold": "batch_threshold",
                "batch_commit_policy": "batch_commit_policy",
            },
            "identity": {
                "maple_principal": "principal",
            },
        }
        for section, section_mapping in mappings.items():
            for env_key, field_key in section_mapping.items():
                if env_key in data:
                    value = data.pop(env_key)
                elif env_key.upper() in os.environ:
                    # Flat names are not declared fields, so read them directly
                    value = os.environ[env_key.upper()]
                else:
                    continue
                transformed.setdefault(section, {})[field_key] = value

        # Merge flat values into any nested values already present
        for section, values in transformed.items():
            existing = data.get(section)
            if isinstance(existing, dict):
                data[section] = {**existing, **values}
            else:
                data[section] = values

        return data

    def ensure_data_dir(self) -> Path:
        """Create the data directory if it doesn't exist and return it."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir


# Singleton instance for application use
settings = Settings()
