"""
SQS batch handler.

Turns an SQS event into messages, forwards them, and answers with a
partial batch response so the queue redelivers only the messages whose
blocks were not stored.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from relay_core.domain.exceptions import OversizeMessageError
from relay_core.runtime.context import RunContext

from .forwarder import Forwarder
from .serializer import Message


def messages_from_event(event: dict[str, Any]) -> list[Message]:
    """Messages of an SQS event, in record order."""
    return [Message.from_sqs_record(record) for record in event.get("Records") or []]


def batch_item_failures(message_ids: list[str]) -> dict[str, Any]:
    return {"batchItemFailures": [{"itemIdentifier": mid} for mid in message_ids]}


def handle_sqs_event(
    event: dict[str, Any],
    forwarder: Forwarder,
    context: RunContext | None = None,
    timeout: float | None = None,
) -> dict[str, Any]:
    """
    Forward every record of an SQS event.

    Messages too large for a block under the reject policy are reported as
    failures on their own; the rest of the batch is still forwarded.

    Args:
        event: SQS event with a "Records" list.
        forwarder: Configured forwarder.
        context: Names the stored objects. Pass RunContext.for_invocation()
            with the invocation's request id to reuse keys on redelivery.
            A fresh context is made if omitted.
        timeout: Seconds after which no new block writes start.

    Returns:
        dict: {"batchItemFailures": [{"itemIdentifier": <messageId>}, ...]}
    """
    messages = messages_from_event(event)
    if not messages:
        return batch_item_failures([])

    if context is None:
        context = RunContext(source=messages[0].source)

    unstored: set[str] = set()
    try:
        result = forwarder.forward_sync(messages, context=context, timeout=timeout)
    except OversizeMessageError as e:
        rejected = {pos for pos, _ in e.offenders}
        logger.error(f"[{context.request_id}] Dropping {len(rejected)} oversize messages: {e}")
        unstored.update(messages[pos].message_id for pos in rejected if messages[pos].message_id)
        pending = [m for pos, m in enumerate(messages) if pos not in rejected]
        result = (
            forwarder.forward_sync(pending, context=context, timeout=timeout) if pending else None
        )

    if result is not None:
        unstored.update(result.failed_message_ids())

    failures = [m.message_id for m in messages if m.message_id in unstored]
    if failures:
        status = result.status.value if result is not None else "rejected"
        logger.warning(
            f"[{context.request_id}] {len(failures)} of {len(messages)} messages not stored "
            f"({status})"
        )
    return batch_item_failures(failures)
