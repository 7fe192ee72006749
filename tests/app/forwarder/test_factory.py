"""Unit tests for the settings-driven forwarder factory."""

from unittest.mock import MagicMock, patch

import pytest

from app.forwarder.factory import build_forwarder, get_forwarder_config
from relay_core.domain.exceptions import (
    ConfigurationErrors,
    InvalidDestinationError,
    InvalidOversizePolicyError,
    InvalidRecordFormatError,
)
from tests.app.forwarder.fakes import FakeStorageClient


class TestGetForwarderConfig:
    """Tests for get_forwarder_config()."""

    def test_reads_settings(self, mock_settings):
        """Config fields should come from settings."""
        client = FakeStorageClient()

        config = get_forwarder_config(client)

        assert config.destination_uri == "s3://bucket/logs"
        assert config.key_prefix == "app/"
        assert config.size_limit == 1024
        assert config.record_format == "raw"
        assert config.max_concurrency == 2
        assert config.storage_client is client
        assert config.logger is not None

    def test_overrides_take_precedence(self, mock_settings):
        config = get_forwarder_config(FakeStorageClient(), key_prefix="other/", size_limit=10)

        assert config.key_prefix == "other/"
        assert config.size_limit == 10

    def test_defaults_to_minio_client(self, mock_settings):
        """Without a client the MinIO storage client should be used."""
        with patch("app.forwarder.factory.get_storage_client") as mock_get:
            mock_get.return_value = MagicMock()

            config = get_forwarder_config()

        assert config.storage_client is mock_get.return_value


class TestBuildForwarder:
    def test_builds_valid_forwarder(self, mock_settings):
        forwarder = build_forwarder(FakeStorageClient())

        assert forwarder.config.destination_uri == "s3://bucket/logs"

    def test_invalid_settings_raise(self, mock_settings):
        with pytest.raises(ConfigurationErrors) as exc_info:
            build_forwarder(FakeStorageClient(), destination_uri="https://example.com")

        assert exc_info.value.wraps(InvalidDestinationError)

    def test_misspelled_settings_are_collected(self, mock_settings):
        """Typos in format and policy settings should be reported together."""
        mock_settings.FORWARDER_RECORD_FORMAT = "jsonl"
        mock_settings.FORWARDER_OVERSIZE_POLICY = "skip"

        with pytest.raises(ConfigurationErrors) as exc_info:
            build_forwarder(FakeStorageClient())

        assert exc_info.value.wraps(InvalidRecordFormatError)
        assert exc_info.value.wraps(InvalidOversizePolicyError)


# --- Fixtures ---


@pytest.fixture
def mock_settings():
    with patch("app.forwarder.factory.settings") as settings:
        settings.FORWARDER_DESTINATION_URI = "s3://bucket/logs"
        settings.FORWARDER_KEY_PREFIX = "app/"
        settings.FORWARDER_SIZE_LIMIT = 1024
        settings.FORWARDER_RECORD_FORMAT = "raw"
        settings.FORWARDER_OVERSIZE_POLICY = "reject"
        settings.FORWARDER_MAX_CONCURRENCY = 2
        yield settings
