from __future__ import annotations
"""
Factory for creating a settings-configured Forwarder.
"""

from typing import Any

from loguru import logger

from relay_core.config import settings

from .config import ForwarderConfig
from .forwarder import Forwarder
from .storage import get_storage_client
from .storage_protocol import StorageClient


def get_forwarder_config(storage_client: StorageClient | None = None, **overrides: Any) -> ForwarderConfig:
    """
    Build a ForwarderConfig from settings.

    Args:
        storage_client: Client to use; the MinIO client if omitted.
        **overrides: ForwarderConfig fields that take precedence over settings.
    """
    values: dict[str, Any] = {
        "destination_uri": settings.FORWARDER_DESTINATION_URI,
        "key_prefix": settings.FORWARDER_KEY_PREFIX,
        "size_limit": settings.FORWARDER_SIZE_LIMIT,
        "record_format": settings.FORWARDER_RECORD_FORMAT,
        "oversize_policy": settings.FORWARDER_OVERSIZE_POLICY,
        "max_concurrency": settings.FORWARDER_MAX_CONCURRENCY,
        "logger": logger,
    }
    values.update(overrides)
    values["storage_client"] = storage_client if storage_client is not None else get_storage_client()
    return ForwarderConfig(**values)


def build_forwarder(storage_client: StorageClient | None = None, **overrides: Any) -> Forwarder:
    """
    Create a fully configured Forwarder.

    Raises:
        ConfigurationErrors: If the resulting configuration is invalid.
    """
    return Forwarder(get_forwarder_config(storage_client, **overrides))
