"""
Forwarder configuration and its validation.

ForwarderConfig is built once per forwarder from settings or by the caller.
Construction never fails on semantic problems; validate() runs every check
and returns all failures together as one ConfigurationErrors value.
"""

from __future__ import annotations

from typing import Any, Literal, get_args
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict

from relay_core.domain.exceptions import (
    ConfigurationError,
    ConfigurationErrors,
    InvalidConcurrencyError,
    InvalidDestinationError,
    InvalidOversizePolicyError,
    InvalidRecordFormatError,
    MissingStorageClientError,
    NonPositiveSizeLimitError,
)

from .storage_protocol import NULL_LOGGER, ForwarderLogger

DESTINATION_SCHEME = "s3"

RecordFormat = Literal["json", "raw"]
OversizePolicy = Literal["reject", "isolate"]

RECORD_FORMATS: tuple[str, ...] = get_args(RecordFormat)
OVERSIZE_POLICIES: tuple[str, ...] = get_args(OversizePolicy)


class Destination(BaseModel):
    """Parsed s3://bucket/optional/path destination."""

    bucket: str
    path_prefix: str = ""

    model_config = ConfigDict(frozen=True)

    def object_name(self, key: str) -> str:
        """Full object name of key inside the bucket."""
        if self.path_prefix:
            return f"{self.path_prefix}/{key}"
        return key


def parse_destination(uri: str) -> Destination:
    """
    Parse and check a destination URI.

    Raises:
        InvalidDestinationError: If the URI is empty, not absolute, has no
            bucket, or uses a scheme other than s3.
    """
    if not uri:
        raise InvalidDestinationError(f"invalid destination URI: {uri!r}")

    try:
        parts = urlsplit(uri)
    except ValueError as e:
        raise InvalidDestinationError(f"invalid destination URI: {e}") from e

    if not parts.scheme:
        raise InvalidDestinationError(f"invalid destination URI: {uri!r} is not absolute")
    if parts.scheme != DESTINATION_SCHEME:
        raise InvalidDestinationError(
            f'invalid destination URI: scheme must be "{DESTINATION_SCHEME}"'
        )
    if not parts.netloc:
        raise InvalidDestinationError(f"invalid destination URI: {uri!r} has no bucket")

    return Destination(bucket=parts.netloc, path_prefix=parts.path.strip("/"))


class ForwarderConfig(BaseModel):
    """
    Static configuration of one forwarder.

    Attributes:
        destination_uri: s3:// URI that blocks are written under.
        key_prefix: Prepended verbatim to every generated key.
        size_limit: Maximum block size in bytes.
        storage_client: StorageClient used for every write.
        logger: Optional ForwarderLogger; absence only silences diagnostics.
        record_format: How each message is framed inside a block.
        oversize_policy: What to do with a message larger than size_limit.
        max_concurrency: Upper bound on simultaneous block writes.
    """

    destination_uri: str = ""
    key_prefix: str = ""
    size_limit: int = 0
    storage_client: Any = None
    logger: Any = None
    record_format: str = "json"
    oversize_policy: str = "reject"
    max_concurrency: int = 4

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def log(self) -> ForwarderLogger:
        """The injected logger, or a no-op one."""
        return self.logger if self.logger is not None else NULL_LOGGER

    @property
    def destination(self) -> Destination:
        """Parsed destination. Only valid after validate() passed."""
        return parse_destination(self.destination_uri)

    def validate(self) -> ConfigurationErrors | None:  # type: ignore[override]
        """Run every check; see validate_config()."""
        return validate_config(self)


def validate_config(config: ForwarderConfig) -> ConfigurationErrors | None:
    """
    Check a forwarder configuration.

    Checks do not short-circuit: the destination, size limit, storage client,
    concurrency, record format and oversize policy are all examined and every
    failure is reported.

    Returns:
        ConfigurationErrors listing each failure in check order, or None if
        the configuration is usable.
    """
    errors: list[ConfigurationError] = []

    try:
        parse_destination(config.destination_uri)
    except InvalidDestinationError as e:
        errors.append(e)

    if config.size_limit <= 0:
        errors.append(NonPositiveSizeLimitError(config.size_limit))

    if config.storage_client is None:
        errors.append(MissingStorageClientError())

    if config.max_concurrency < 1:
        errors.append(InvalidConcurrencyError(config.max_concurrency))

    if config.record_format not in RECORD_FORMATS:
        errors.append(InvalidRecordFormatError(config.record_format, RECORD_FORMATS))

    if config.oversize_policy not in OVERSIZE_POLICIES:
        errors.append(InvalidOversizePolicyError(config.oversize_policy, OVERSIZE_POLICIES))

    if errors:
        return ConfigurationErrors(errors)
    return None
