"""
Storage writer: persists payload blocks through the storage client.

Writes run as asyncio tasks bounded by a semaphore. A failed write only
affects its own block; a FatalDestinationError (or any error flagged
fatal) stops new writes for the rest of the call. Cancellation and
deadlines are checked before each write starts; writes already in flight
are allowed to finish and keep their real outcome.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Sequence

from .result import BlockOutcome, BlockStatus, ForwardingResult, SkipReason
from .serializer import PayloadBlock
from .storage_protocol import NULL_LOGGER, ForwarderLogger, StorageClient


class StorageWriter:
    """
    Fan-out writer for the blocks of one forwarding call.

    Usage:
        writer = StorageWriter(max_concurrency=4)
        result = await writer.write(blocks, keys, "s3://bucket/logs", client)
    """

    def __init__(self, max_concurrency: int = 4, logger: ForwarderLogger = NULL_LOGGER):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got: {max_concurrency}")
        self.max_concurrency = max_concurrency
        self._log = logger

    async def write(
        self,
        blocks: Sequence[PayloadBlock],
        keys: Sequence[str],
        destination_uri: str,
        storage_client: StorageClient,
        cancel_event: asyncio.Event | None = None,
        deadline: float | None = None,
    ) -> ForwardingResult:
        """
        Write every block under its key.

        Args:
            blocks: Blocks in order.
            keys: One key per block, same order.
            destination_uri: Destination passed through to the client.
            storage_client: Client shared by all writes.
            cancel_event: Once set, no further writes start.
            deadline: Event loop time (loop.time()) after which no further
                writes start.

        Returns:
            ForwardingResult with one outcome per block, in block order.
        """
        if len(blocks) != len(keys):
            raise ValueError(f"got {len(blocks)} blocks but {len(keys)} keys")

        loop = asyncio.get_running_loop()
        semaphore = asyncio.Semaphore(self.max_concurrency)
        outcomes: list[BlockOutcome | None] = [None] * len(blocks)
        aborted = False

        def stop_reason() -> SkipReason | None:
            if aborted:
                return SkipReason.ABORTED
            if cancel_event is not None and cancel_event.is_set():
                return SkipReason.CANCELLED
            if deadline is not None and loop.time() >= deadline:
                return SkipReason.CANCELLED
            return None

        async def write_one(position: int, block: PayloadBlock, key: str) -> None:
            nonlocal aborted
            base = {
                "index": block.index,
                "key": key,
                "size": block.size,
                "message_ids": block.message_ids,
                "oversize": block.oversize,
            }
            async with semaphore:
                reason = stop_reason()
                if reason is not None:
                    outcomes[position] = BlockOutcome(
                        status=BlockStatus.NOT_ATTEMPTED, skip_reason=reason, **base
                    )
                    return

                try:
                    await self._put(storage_client, destination_uri, key, block.data)
                except Exception as e:
                    if getattr(e, "fatal", False):
                        aborted = True
                        self._log.error(
                            f"Fatal error writing {key} to {destination_uri}, "
                            f"abandoning remaining writes: {e}"
                        )
                    else:
                        self._log.warning(f"Failed to write {key} to {destination_uri}: {e}")
                    outcomes[position] = BlockOutcome(
                        status=BlockStatus.FAILED, error=e, **base
                    )
                    return

                self._log.debug(f"Wrote {block.size} bytes to {destination_uri} as {key}")
                outcomes[position] = BlockOutcome(status=BlockStatus.SUCCEEDED, **base)

        await asyncio.gather(
            *(write_one(i, block, key) for i, (block, key) in enumerate(zip(blocks, keys)))
        )

        result = ForwardingResult(
            outcomes=[o for o in outcomes if o is not None],
            destination_uri=destination_uri,
        )
        self._log.info(
            f"Forwarded {len(result.succeeded)}/{len(blocks)} blocks to {destination_uri} "
            f"({result.status.value})"
        )
        return result

    @staticmethod
    async def _put(
        storage_client: StorageClient, destination_uri: str, key: str, payload: bytes
    ) -> None:
        """Call put, off the event loop when the client is synchronous."""
        if inspect.iscoroutinefunction(storage_client.put):
            await storage_client.put(destination_uri, key, payload)
            return

        pending = await asyncio.to_thread(storage_client.put, destination_uri, key, payload)
        if inspect.isawaitable(pending):
            await pending
