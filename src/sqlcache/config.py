"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env files.
Validates table addressing and provides typed access to settings.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sqlcache.cache.sql_cache import SqlCacheOptions
from sqlcache.dialects import IDENTIFIER_PATTERN
from sqlcache.types import Dialect


class Settings(BaseSettings):
    """Cache settings loaded from environment variables.

    Optional:
        CACHE_DATABASE_NAME: Database (schema) holding the cache table
        CACHE_TABLE_NAME: Cache table name
        CACHE_DELETE_EXPIRED_ITEMS: Delete expired rows on read
        CACHE_DEFAULT_TTL: Default TTL in seconds
        CACHE_DIALECT: SQL dialect (sqlite or mysql)
        CACHE_DB_PATH: SQLite file used by the CLI
        LOG_LEVEL: Logging level
        LOG_FILE: Optional JSON lines log file
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    CACHE_DATABASE_NAME: str = Field(
        default="main", description="Database (schema) holding the cache table"
    )
    CACHE_TABLE_NAME: str = Field(default="cache", description="Cache table name")
    CACHE_DELETE_EXPIRED_ITEMS: bool = Field(
        default=True, description="Delete expired rows when a read finds them"
    )
    CACHE_DEFAULT_TTL: int = Field(default=300, ge=0, description="Default TTL in seconds")
    CACHE_DIALECT: Dialect = Field(default=Dialect.SQLITE, description="SQL dialect")
    CACHE_DB_PATH: Path = Field(
        default=Path(".cache/sqlcache.db"), description="SQLite database file"
    )

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Logging level"
    )
    LOG_FILE: Path | None = Field(default=None, description="JSON lines log file")

    @field_validator("CACHE_DATABASE_NAME", "CACHE_TABLE_NAME")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """Table addressing must be a plain SQL identifier."""
        if not IDENTIFIER_PATTERN.match(v):
            raise ValueError(
                "must be a plain SQL identifier (letters, digits, underscore)"
            )
        return v

    def cache_options(self, client: Any) -> SqlCacheOptions:
        """Build SqlCache options around a query executor."""
        return SqlCacheOptions(
            client=client,
            database_name=self.CACHE_DATABASE_NAME,
            table_name=self.CACHE_TABLE_NAME,
            delete_expired_items=self.CACHE_DELETE_EXPIRED_ITEMS,
            default_ttl=self.CACHE_DEFAULT_TTL,
            dialect=self.CACHE_DIALECT,
        )

    def display(self) -> dict[str, str | int | bool | None]:
        """Return settings for display."""
        return {
            "CACHE_DATABASE_NAME": self.CACHE_DATABASE_NAME,
            "CACHE_TABLE_NAME": self.CACHE_TABLE_NAME,
            "CACHE_DELETE_EXPIRED_ITEMS": self.CACHE_DELETE_EXPIRED_ITEMS,
            "CACHE_DEFAULT_TTL": self.CACHE_DEFAULT_TTL,
            "CACHE_DIALECT": self.CACHE_DIALECT.value,
            "CACHE_DB_PATH": str(self.CACHE_DB_PATH),
            "LOG_LEVEL": self.LOG_LEVEL,
            "LOG_FILE": str(self.LOG_FILE) if self.LOG_FILE else None,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
