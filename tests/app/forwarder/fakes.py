from __future__ import annotations
"""
Fake implementations of forwarder collaborators for testing.
"""

import asyncio
import threading
from typing import Any

from app.forwarder.storage_protocol import ForwarderLogger, StorageClient


class FakeStorageClient(StorageClient):
    """In-memory synchronous storage client.

    errors maps a key suffix (e.g. "-000001.jsonl") to the exception raised
    when a key with that suffix is written.
    """

    def __init__(self, errors: dict[str, Exception] | None = None):
        self.errors = errors or {}
        self.objects: dict[tuple[str, str], bytes] = {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def put(self, destination_uri: str, key: str, payload: bytes) -> None:
        with self._lock:
            self.calls.append(key)
        for suffix, error in self.errors.items():
            if key.endswith(suffix):
                raise error
        with self._lock:
            self.objects[(destination_uri, key)] = payload

    def stored_keys(self) -> list[str]:
        return sorted(key for _, key in self.objects)


class AsyncFakeStorageClient(StorageClient):
    """Awaitable storage client that can hold writes until released."""

    def __init__(self, errors: dict[str, Exception] | None = None):
        self.errors = errors or {}
        self.objects: dict[str, bytes] = {}
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.release = asyncio.Event()
        self.release.set()

    async def put(self, destination_uri: str, key: str, payload: bytes) -> None:
        self.calls.append(key)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await self.release.wait()
            await asyncio.sleep(0)
            for suffix, error in self.errors.items():
                if key.endswith(suffix):
                    raise error
            self.objects[key] = payload
        finally:
            self.in_flight -= 1


class RecordingLogger(ForwarderLogger):
    def __init__(self):
        self.records: list[tuple[str, str]] = []

    def _record(self, level: str, message: str) -> None:
        self.records.append((level, message))

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("debug", message)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("info", message)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("warning", message)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("error", message)

    def levels(self) -> list[str]:
        return [level for level, _ in self.records]
