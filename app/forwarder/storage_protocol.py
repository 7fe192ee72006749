"""
Collaborator protocols for the forwarder.

This module defines the two capabilities the forwarder consumes but does
not implement: the object storage client that persists payload blocks, and
the logger that receives diagnostic events. Both are narrow so the pipeline
can be exercised against in-memory fakes.
"""

from typing import Any, Awaitable, Protocol, runtime_checkable


@runtime_checkable
class StorageClient(Protocol):
    """
    Abstract object storage interface for payload blocks.

    Implementations may be synchronous or return an awaitable. They must be
    safe to call concurrently, since one client instance is shared by every
    block write of a forwarding call.
    """

    def put(self, destination_uri: str, key: str, payload: bytes) -> Awaitable[None] | None:
        """
        Store payload under key at the destination.

        Args:
            destination_uri: The s3:// destination the forwarder was built with.
            key: The generated storage key (relative to the destination).
            payload: The block bytes.

        Raises:
            Exception: Any failure. FatalDestinationError tells the forwarder
                to abandon the rest of the batch.
        """
        ...


@runtime_checkable
class ForwarderLogger(Protocol):
    """Structured diagnostic sink. The loguru logger satisfies it."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    def info(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    def error(self, message: str, *args: Any, **kwargs: Any) -> None: ...


class NullLogger:
    """Logger that discards everything; used when none is injected."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass


NULL_LOGGER = NullLogger()
