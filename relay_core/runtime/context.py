"""
Invocation-scoped context for forwarding operations.

RunContext carries the correlation ID and timestamp that name the objects
written by one forwarding call, plus an optional deadline. It is created
once per batch, either by a queue handler or directly by a caller.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RunContext(BaseModel):
    """Invocation-scoped context for one forwarding call.

    Attributes:
        request_id: Unique identifier of the call; part of every storage key.
        started_at: When the call started; drives the time-based key path.
        source: Optional identifier of the queue or producer of the batch.
        deadline: Optional absolute deadline for the operation.
    """

    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    started_at: datetime = Field(default_factory=_utcnow)
    source: str | None = None
    deadline: datetime | None = None

    model_config = {"frozen": True}

    @field_validator("started_at", "deadline")
    @classmethod
    def _to_utc(cls, value: datetime | None) -> datetime | None:
        """Naive datetimes are read as local time, like datetime.now()."""
        if value is None:
            return None
        return value.astimezone(timezone.utc)

    @classmethod
    def for_invocation(
        cls,
        request_id: str,
        source: str | None = None,
    ) -> "RunContext":
        """Create a RunContext for a handler invocation.

        Reusing the invocation's own request ID keeps keys stable when the
        same invocation is replayed.

        Args:
            request_id: Invocation or batch identifier.
            source: Optional queue or producer identifier.

        Returns:
            A new RunContext starting now.
        """
        return cls(request_id=request_id, source=source)

    def with_deadline(self, deadline: datetime) -> "RunContext":
        """Return a new context with the specified deadline.

        Args:
            deadline: Absolute datetime by which operation should complete.

        Returns:
            New RunContext with the deadline set.
        """
        return type(self)(**{**self.model_dump(), "deadline": deadline})

    def remaining_seconds(self, now: datetime | None = None) -> float | None:
        """Seconds left until the deadline, or None without one.

        Never negative.
        """
        if self.deadline is None:
            return None
        current = now or _utcnow()
        if current.tzinfo is None:
            current = current.astimezone(timezone.utc)
        return max(0.0, (self.deadline - current).total_seconds())
