"""
Outcome models for a forwarding call.

ForwardingResult is the single source of truth about what was stored:
every block appears exactly once, in block order, whatever order the
writes completed in.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from relay_core.runtime.errors import ErrorCode, ServiceError


class BlockStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NOT_ATTEMPTED = "not_attempted"


class SkipReason(str, Enum):
    """Why a block was never written."""

    CANCELLED = "cancelled"
    ABORTED = "aborted"


class ResultStatus(str, Enum):
    EMPTY = "empty"
    SUCCEEDED = "succeeded"
    PARTIAL = "partial"
    FAILED = "failed"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


class BlockOutcome(BaseModel):
    """
    What happened to one block.

    Attributes:
        index: Block index within the call.
        key: Storage key the block was (or would have been) written to.
        status: succeeded, failed, or not_attempted.
        error: The exception raised by the storage client, for failed blocks.
        skip_reason: cancelled or aborted, for blocks never attempted.
        size: Block size in bytes.
        message_ids: IDs of the messages carried by the block.
        oversize: Block exceeds the size limit (isolate policy).
    """

    index: int
    key: str
    status: BlockStatus
    error: Exception | None = None
    skip_reason: SkipReason | None = None
    size: int = 0
    message_ids: list[str] = Field(default_factory=list)
    oversize: bool = False

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def stored(self) -> bool:
        return self.status == BlockStatus.SUCCEEDED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "index": self.index,
            "key": self.key,
            "status": self.status.value,
            "size": self.size,
            "message_ids": list(self.message_ids),
        }
        if self.oversize:
            data["oversize"] = True
        if self.skip_reason is not None:
            data["skip_reason"] = self.skip_reason.value
        if self.error is not None:
            data["error"] = _error_to_dict(self.error)
        return data


def _error_to_dict(error: Exception) -> dict[str, Any]:
    if isinstance(error, ServiceError):
        return error.to_dict()
    return {"code": ErrorCode.STORAGE_WRITE_ERROR, "message": str(error) or type(error).__name__}


class ForwardingResult(BaseModel):
    """Aggregated outcome of one forwarding call."""

    outcomes: list[BlockOutcome] = Field(default_factory=list)
    request_id: str | None = None
    destination_uri: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def succeeded(self) -> list[BlockOutcome]:
        return [o for o in self.outcomes if o.status == BlockStatus.SUCCEEDED]

    @property
    def failed(self) -> list[BlockOutcome]:
        return [o for o in self.outcomes if o.status == BlockStatus.FAILED]

    @property
    def not_attempted(self) -> list[BlockOutcome]:
        return [o for o in self.outcomes if o.status == BlockStatus.NOT_ATTEMPTED]

    @property
    def keys(self) -> list[str]:
        """Keys of the blocks that were stored."""
        return [o.key for o in self.succeeded]

    @property
    def has_oversize(self) -> bool:
        return any(o.oversize for o in self.outcomes)

    @property
    def status(self) -> ResultStatus:
        """
        Overall status.

        aborted and cancelled take precedence, so a caller can tell an
        abandoned batch from one with isolated write failures.
        """
        if not self.outcomes:
            return ResultStatus.EMPTY
        reasons = {o.skip_reason for o in self.outcomes}
        if SkipReason.ABORTED in reasons:
            return ResultStatus.ABORTED
        if SkipReason.CANCELLED in reasons:
            return ResultStatus.CANCELLED
        stored = len(self.succeeded)
        if stored == len(self.outcomes):
            return ResultStatus.SUCCEEDED
        if stored == 0:
            return ResultStatus.FAILED
        return ResultStatus.PARTIAL

    def failed_message_ids(self) -> list[str]:
        """IDs of every message in a block that was not stored, in order."""
        ids: list[str] = []
        for outcome in self.outcomes:
            if not outcome.stored:
                ids.extend(outcome.message_ids)
        return ids

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "request_id": self.request_id,
            "destination_uri": self.destination_uri,
            "blocks": [o.to_dict() for o in self.outcomes],
        }
