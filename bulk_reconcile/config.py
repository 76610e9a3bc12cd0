"""
Configuration settings for bulk-reconcile.

Uses Pydantic Settings to load environment variables for logging, lookup query
limits, and retry behaviour of the remote store adapters. The engine receives a
Settings instance explicitly; `get_settings()` is only the default.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Lookup queries
    max_query_length: int = Field(100_000, alias="MAX_QUERY_LENGTH", gt=0)
    max_query_clauses: int = Field(500, alias="MAX_QUERY_CLAUSES", gt=0)

    # Remote store retries (lookup queries only)
    query_retry_attempts: int = Field(3, alias="QUERY_RETRY_ATTEMPTS", ge=1)
    query_retry_max_wait: float = Field(10.0, alias="QUERY_RETRY_MAX_WAIT", ge=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
