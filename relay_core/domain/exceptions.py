"""
Standard exceptions for relay-forwarder.

This module defines the hierarchy of exceptions used across the forwarder.
"""

from __future__ import annotations

from typing import Iterator, Sequence


class ForwarderError(Exception):
    """Base exception for all relay-forwarder errors."""
    pass


class ConfigurationError(ForwarderError):
    """Base exception for forwarder configuration errors."""
    pass


class InvalidDestinationError(ConfigurationError):
    """Destination URI is empty, unparsable, or not an s3:// URI."""
    pass


class NonPositiveSizeLimitError(ConfigurationError):
    """Size limit is zero or negative."""

    def __init__(self, size_limit: int):
        super().__init__(f"size limit must be a positive value, got: {size_limit}")
        self.size_limit = size_limit


class MissingStorageClientError(ConfigurationError):
    """No storage client was supplied."""

    def __init__(self, message: str = "missing storage client"):
        super().__init__(message)


class InvalidConcurrencyError(ConfigurationError):
    """Write concurrency is below one."""

    def __init__(self, max_concurrency: int):
        super().__init__(f"max concurrency must be at least 1, got: {max_concurrency}")
        self.max_concurrency = max_concurrency


class InvalidRecordFormatError(ConfigurationError):
    """Record format is not one the serializer knows."""

    def __init__(self, record_format: str, allowed: Sequence[str]):
        super().__init__(
            f"record format must be one of {', '.join(allowed)}, got: {record_format!r}"
        )
        self.record_format = record_format


class InvalidOversizePolicyError(ConfigurationError):
    """Oversize policy is neither reject nor isolate."""

    def __init__(self, policy: str, allowed: Sequence[str]):
        super().__init__(f"oversize policy must be one of {', '.join(allowed)}, got: {policy!r}")
        self.policy = policy


class ConfigurationErrors(ConfigurationError):
    """Every configuration check that failed, in check order.

    Raised as a single error so callers see all problems in one pass.
    """

    def __init__(self, errors: Sequence[ConfigurationError]):
        self.errors: tuple[ConfigurationError, ...] = tuple(errors)
        super().__init__("\n".join(str(e) for e in self.errors))

    def wraps(self, kind: type[BaseException]) -> bool:
        """Return True if any collected error is an instance of ``kind``."""
        return any(isinstance(e, kind) for e in self.errors)

    def __iter__(self) -> Iterator[ConfigurationError]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigurationErrors):
            return NotImplemented
        return [(type(e), str(e)) for e in self.errors] == [
            (type(e), str(e)) for e in other.errors
        ]

    def __hash__(self) -> int:
        return hash(tuple((type(e), str(e)) for e in self.errors))


class SerializationError(ForwarderError):
    """Base exception for message serialization errors."""
    pass


class OversizeMessageError(SerializationError):
    """One or more messages cannot fit in a block on their own.

    Attributes:
        size_limit: The configured block size limit in bytes.
        offenders: (position in batch, encoded size) for each oversize message.
    """

    def __init__(self, size_limit: int, offenders: Sequence[tuple[int, int]]):
        self.size_limit = size_limit
        self.offenders = list(offenders)
        detail = ", ".join(f"#{pos} ({size} bytes)" for pos, size in self.offenders)
        super().__init__(
            f"{len(self.offenders)} message(s) exceed the size limit of {size_limit} bytes: {detail}"
        )
