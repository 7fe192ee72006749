"""
Size-bounded serialization of messages into payload blocks.

Messages are framed one record per line and packed greedily, in order,
into blocks no larger than the configured size limit. A record is never
split across blocks.
"""

from __future__ import annotations

import base64
import json
from datetime import datetime, timezone
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field

from relay_core.domain.exceptions import OversizeMessageError

from .config import OversizePolicy, RecordFormat
from .storage_protocol import NULL_LOGGER, ForwarderLogger


class Message(BaseModel):
    """
    One inbound unit of data. Read-only to the forwarder.

    Attributes:
        body: Raw payload bytes.
        message_id: Identifier assigned by the queue, if any.
        received_at: When the queue first received the message.
        source: Queue or producer identifier.
        attributes: Free-form string metadata.
    """

    body: bytes
    message_id: str | None = None
    received_at: datetime | None = None
    source: str | None = None
    attributes: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_sqs_record(cls, record: dict[str, Any]) -> "Message":
        """Build a message from one record of an SQS event."""
        attributes = record.get("attributes") or {}
        received_at = None
        sent = attributes.get("ApproximateFirstReceiveTimestamp") or attributes.get(
            "SentTimestamp"
        )
        if sent:
            received_at = datetime.fromtimestamp(int(sent) / 1000, tz=timezone.utc)

        return cls(
            body=(record.get("body") or "").encode("utf-8"),
            message_id=record.get("messageId"),
            received_at=received_at,
            source=record.get("eventSourceARN"),
            attributes={str(k): str(v) for k, v in attributes.items()},
        )


class PayloadBlock(BaseModel):
    """
    An ordered run of encoded messages written as one storage object.

    Attributes:
        index: Position of the block within its forwarding call (0-based).
        data: Concatenated records.
        messages: The messages whose records make up data, in order.
        oversize: True if data exceeds the size limit (isolate policy only).
    """

    index: int
    data: bytes
    messages: tuple[Message, ...]
    oversize: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def message_ids(self) -> list[str]:
        return [m.message_id for m in self.messages if m.message_id is not None]


def encode_record(message: Message, record_format: RecordFormat = "json") -> bytes:
    """
    Frame one message as a newline-terminated record.

    raw: the body, plus a newline unless it already ends with one.
    json: a compact JSON envelope on one line. Bodies that are not valid
    UTF-8 are base64 encoded and marked with "bodyEncoding".
    """
    if record_format == "raw":
        if message.body.endswith(b"\n"):
            return message.body
        return message.body + b"\n"

    envelope: dict[str, Any] = {
        "messageId": message.message_id,
        "source": message.source,
        "receivedAt": message.received_at.isoformat() if message.received_at else None,
        "attributes": message.attributes,
    }
    try:
        envelope["body"] = message.body.decode("utf-8")
    except UnicodeDecodeError:
        envelope["body"] = base64.b64encode(message.body).decode("ascii")
        envelope["bodyEncoding"] = "base64"

    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False).encode("utf-8") + b"\n"


class BlockSerializer:
    """
    Packs messages into size-bounded payload blocks.

    Packing is greedy and order preserving, which gives the fewest blocks
    possible without reordering or splitting records.

    Usage:
        serializer = BlockSerializer(size_limit=5 * 1024 * 1024)
        blocks = serializer.serialize(messages)
    """

    def __init__(
        self,
        size_limit: int,
        record_format: RecordFormat = "json",
        oversize_policy: OversizePolicy = "reject",
        logger: ForwarderLogger = NULL_LOGGER,
    ):
        self.size_limit = size_limit
        self.record_format = record_format
        self.oversize_policy = oversize_policy
        self._log = logger

    def serialize(self, messages: Iterable[Message]) -> list[PayloadBlock]:
        """
        Encode and pack messages.

        Args:
            messages: Messages in delivery order.

        Returns:
            list: Blocks in order; empty if there are no messages.

        Raises:
            OversizeMessageError: Under the reject policy, if any record is
                larger than size_limit. Nothing is packed in that case.
        """
        messages = list(messages)
        records = [encode_record(m, self.record_format) for m in messages]

        if self.oversize_policy == "reject":
            offenders = [
                (pos, len(record))
                for pos, record in enumerate(records)
                if len(record) > self.size_limit
            ]
            if offenders:
                raise OversizeMessageError(self.size_limit, offenders)

        blocks: list[PayloadBlock] = []
        parts: list[bytes] = []
        members: list[Message] = []
        size = 0

        def flush(oversize: bool = False) -> None:
            nonlocal parts, members, size
            if not parts:
                return
            blocks.append(
                PayloadBlock(
                    index=len(blocks),
                    data=b"".join(parts),
                    messages=tuple(members),
                    oversize=oversize,
                )
            )
            parts, members, size = [], [], 0

        for message, record in zip(messages, records):
            if len(record) > self.size_limit:
                # isolate policy: the record gets a block of its own
                flush()
                parts, members, size = [record], [message], len(record)
                flush(oversize=True)
                self._log.warning(
                    f"Message {message.message_id or '?'} is {len(record)} bytes, "
                    f"over the {self.size_limit} byte limit; isolated in block {len(blocks) - 1}"
                )
                continue

            if size + len(record) > self.size_limit:
                flush()

            parts.append(record)
            members.append(message)
            size += len(record)

        flush()

        self._log.debug(f"Packed {len(messages)} messages into {len(blocks)} blocks")
        return blocks


def serialize(
    messages: Iterable[Message],
    size_limit: int,
    record_format: RecordFormat = "json",
    oversize_policy: OversizePolicy = "reject",
) -> list[PayloadBlock]:
    """Pack messages into blocks of at most size_limit bytes."""
    return BlockSerializer(
        size_limit=size_limit,
        record_format=record_format,
        oversize_policy=oversize_policy,
    ).serialize(messages)
