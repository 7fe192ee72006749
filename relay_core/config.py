"""
Unified configuration for relay-forwarder.

This module provides a single Settings class that consolidates all
environment variables used by the forwarder and its storage adapter.
Values are loaded from the .env file and can be overridden by the environment.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for .env file loading (allows running from any CWD)
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# 4.5 GiB, the largest object the forwarder is expected to produce
DEFAULT_SIZE_LIMIT = int(4.5 * 1024 * 1024 * 1024)


class Settings(BaseSettings):
    """
    Unified settings for relay-forwarder.

    Forwarder fields are not validated here; ForwarderConfig.validate()
    reports every problem at once when the forwarder is built.
    """

    # Forwarding destination
    FORWARDER_DESTINATION_URI: str = ""
    FORWARDER_KEY_PREFIX: str = ""
    FORWARDER_SIZE_LIMIT: int = DEFAULT_SIZE_LIMIT
    FORWARDER_RECORD_FORMAT: str = "json"
    FORWARDER_OVERSIZE_POLICY: str = "reject"
    FORWARDER_MAX_CONCURRENCY: int = 4
    FORWARDER_TIMEOUT_SECONDS: float | None = None

    # MinIO / S3-compatible object storage
    MINIO_ENDPOINT: str = "localhost:9000"
    MINIO_ACCESS_KEY: str = "minioadmin"
    MINIO_SECRET_KEY: str = "minioadmin"
    MINIO_SECURE: bool = False
    MINIO_REGION: str | None = None

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        extra="ignore"
    )


# Global settings instance
settings = Settings()  # type: ignore
