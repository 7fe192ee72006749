"""
Forwarder: the bounded forwarding pipeline.

    messages -> BlockSerializer -> KeyGenerator -> StorageWriter -> ForwardingResult

A Forwarder validates its configuration once, at construction, and then
handles any number of independent forwarding calls. It keeps no state
between calls.
"""

from __future__ import annotations

import asyncio
from typing import Iterable

from relay_core.runtime.context import RunContext

from .config import ForwarderConfig
from .keys import KeyGenerator
from .result import ForwardingResult
from .serializer import BlockSerializer, Message
from .writer import StorageWriter


class Forwarder:
    """
    Relays batches of messages to object storage.

    Usage:
        forwarder = Forwarder(ForwarderConfig(
            destination_uri="s3://bucket/logs",
            key_prefix="app/",
            size_limit=5 * 1024 * 1024,
            storage_client=client,
        ))
        result = await forwarder.forward(messages)
    """

    def __init__(self, config: ForwarderConfig):
        """
        Args:
            config: Forwarder configuration.

        Raises:
            ConfigurationErrors: Every problem found in config.
        """
        errors = config.validate()
        if errors is not None:
            config.log.error(f"Invalid forwarder configuration: {errors}")
            raise errors

        self.config = config
        self._log = config.log
        self.serializer = BlockSerializer(
            size_limit=config.size_limit,
            record_format=config.record_format,
            oversize_policy=config.oversize_policy,
            logger=self._log,
        )
        self.key_generator = KeyGenerator(record_format=config.record_format)
        self.writer = StorageWriter(max_concurrency=config.max_concurrency, logger=self._log)

    async def forward(
        self,
        messages: Iterable[Message],
        context: RunContext | None = None,
        cancel_event: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> ForwardingResult:
        """
        Forward one batch.

        Args:
            messages: Messages in delivery order.
            context: Names the call's objects; a fresh one is made if omitted.
            cancel_event: Once set, no further block writes start.
            timeout: Seconds from now after which no further block writes
                start. The context deadline, if earlier, also applies.

        Returns:
            ForwardingResult describing every block.

        Raises:
            OversizeMessageError: Under the reject policy; nothing is written.
        """
        context = context or RunContext()
        blocks = self.serializer.serialize(messages)
        keys = self.key_generator.keys_for(self.config.key_prefix, len(blocks), context)

        result = await self.writer.write(
            blocks,
            keys,
            self.config.destination_uri,
            self.config.storage_client,
            cancel_event=cancel_event,
            deadline=self._deadline(context, timeout),
        )
        return result.model_copy(update={"request_id": context.request_id})

    def forward_sync(
        self,
        messages: Iterable[Message],
        context: RunContext | None = None,
        timeout: float | None = None,
    ) -> ForwardingResult:
        """Run forward() to completion on a fresh event loop."""
        return asyncio.run(self.forward(messages, context=context, timeout=timeout))

    @staticmethod
    def _deadline(context: RunContext, timeout: float | None) -> float | None:
        """Earliest of timeout and the context deadline, as event loop time."""
        budgets = [b for b in (timeout, context.remaining_seconds()) if b is not None]
        if not budgets:
            return None
        return asyncio.get_running_loop().time() + min(budgets)
