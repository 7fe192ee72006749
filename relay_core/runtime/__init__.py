"""
Service runtime layer for relay-forwarder.

This package provides shared infrastructure for reliability and observability:
- RunContext: Invocation-scoped context with correlation IDs
- ServiceError: Standardized errors with retry and fatality semantics
- RetryPolicy: Configurable retry behavior for storage adapters
"""

from .context import RunContext
from .errors import (
    ErrorCode,
    FatalDestinationError,
    RetryableError,
    ServiceError,
    TerminalError,
)
from .retry import RetryPolicy, sync_with_retry

__all__ = [
    "RunContext",
    "ServiceError",
    "RetryableError",
    "TerminalError",
    "FatalDestinationError",
    "ErrorCode",
    "RetryPolicy",
    "sync_with_retry",
]
