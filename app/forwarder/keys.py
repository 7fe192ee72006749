"""
Storage key generation.

Keys look like:

    <prefix>YYYY/MM/DD/HH/<request_id>-<block index, 6 digits><extension>

The UTC hour path sorts objects chronologically, the request ID separates
forwarding calls, and the zero-padded block index keeps blocks of one call
unique and in message order.
"""

from __future__ import annotations

from datetime import timezone

from relay_core.runtime.context import RunContext

from .config import RecordFormat

EXTENSIONS: dict[str, str] = {
    "json": ".jsonl",
    "raw": ".log",
}


class KeyGenerator:
    """
    Derives storage keys for the blocks of a forwarding call.

    Keys are a pure function of (prefix, block_index, context), so replaying
    a call with the same RunContext overwrites the same objects instead of
    duplicating them.
    """

    def __init__(self, record_format: RecordFormat = "json"):
        self.extension = EXTENSIONS[record_format]

    def next_key(self, prefix: str, block_index: int, context: RunContext) -> str:
        """
        Build the key of one block.

        Args:
            prefix: Caller-supplied key prefix, used verbatim.
            block_index: 0-based position of the block in its call.
            context: The call's RunContext (request ID and start time).

        Returns:
            str: The storage key.
        """
        if block_index < 0:
            raise ValueError(f"block_index must be non-negative, got: {block_index}")

        started = context.started_at
        if started.tzinfo is not None:
            started = started.astimezone(timezone.utc)

        return (
            f"{prefix}{started:%Y/%m/%d/%H}/"
            f"{context.request_id}-{block_index:06d}{self.extension}"
        )

    def keys_for(self, prefix: str, count: int, context: RunContext) -> list[str]:
        """Keys for blocks 0..count-1 of one call."""
        return [self.next_key(prefix, i, context) for i in range(count)]
