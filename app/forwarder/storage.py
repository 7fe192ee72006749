"""
S3-compatible storage client for the forwarder.

This module provides:
- MinioStorageClient: StorageClient backed by the MinIO SDK
- get_storage_client: Factory returning the client built from settings

Failures are classified for the forwarder: destination-level problems
raise FatalDestinationError, transient ones are retried here and surface
as RetryableError once retries run out, anything else is a TerminalError.
"""

from __future__ import annotations

import io

from loguru import logger
from minio import Minio
from minio.error import S3Error, ServerError
from urllib3.exceptions import HTTPError as TransportError

from relay_core.infrastructure.minio import get_minio_client
from relay_core.runtime.errors import (
    ErrorCode,
    FatalDestinationError,
    RetryableError,
    TerminalError,
)
from relay_core.runtime.retry import DEFAULT_RETRY_POLICY, RetryPolicy, sync_with_retry

from .config import parse_destination

FATAL_S3_CODES = {
    "NoSuchBucket": ErrorCode.DESTINATION_NOT_FOUND,
    "AccessDenied": ErrorCode.DESTINATION_ACCESS_DENIED,
    "AllAccessDisabled": ErrorCode.DESTINATION_ACCESS_DENIED,
    "InvalidAccessKeyId": ErrorCode.DESTINATION_ACCESS_DENIED,
    "SignatureDoesNotMatch": ErrorCode.DESTINATION_ACCESS_DENIED,
}

CONTENT_TYPES = {
    ".jsonl": "application/x-ndjson",
    ".log": "text/plain; charset=utf-8",
}


class MinioStorageClient:
    """
    StorageClient writing blocks with MinIO put_object.

    The bucket comes from the destination host and the destination path is
    prepended to every key. One instance is safe to share between threads.

    Usage:
        client = MinioStorageClient()
        client.put("s3://logs/forwarded", "app/2026/10/19/08/req-000000.jsonl", data)
    """

    def __init__(self, client: Minio | None = None, retry_policy: RetryPolicy | None = None):
        """
        Args:
            client: MinIO client; the shared connector instance if omitted.
            retry_policy: Policy for transient failures.
        """
        self._client = client or get_minio_client()
        self.retry_policy = retry_policy or DEFAULT_RETRY_POLICY
        self._put_with_retry = sync_with_retry(self.retry_policy)(self._put_object)

    def put(self, destination_uri: str, key: str, payload: bytes) -> None:
        """
        Store payload at destination_uri/key.

        Raises:
            FatalDestinationError: The bucket is missing or access is denied.
            RetryableError: A transient failure outlasted the retry policy.
            TerminalError: Any other rejected write.
        """
        destination = parse_destination(destination_uri)
        self._put_with_retry(destination.bucket, destination.object_name(key), payload)

    def _put_object(self, bucket: str, object_name: str, payload: bytes) -> None:
        logger.debug(f"Uploading {len(payload)} bytes to {bucket}/{object_name}")
        try:
            self._client.put_object(
                bucket_name=bucket,
                object_name=object_name,
                data=io.BytesIO(payload),
                length=len(payload),
                content_type=_content_type(object_name),
            )
        except S3Error as e:
            raise self._classify(e, bucket, object_name) from e
        except ServerError as e:
            # 5xx without an S3 error body, usually from a proxy or load balancer
            raise RetryableError(
                code=ErrorCode.STORAGE_UNAVAILABLE,
                message_safe=f"Object storage returned HTTP {e.status_code} writing {bucket}/{object_name}",
                message_debug=str(e),
                cause=e,
            ) from e
        except TransportError as e:
            raise RetryableError(
                code=ErrorCode.CONNECTION_ERROR,
                message_safe=f"Could not reach object storage writing {bucket}/{object_name}",
                message_debug=str(e),
                cause=e,
            ) from e

    def _classify(self, error: S3Error, bucket: str, object_name: str):
        code = error.code or ""
        if code in FATAL_S3_CODES:
            return FatalDestinationError(
                code=FATAL_S3_CODES[code],
                message_safe=f"Destination bucket '{bucket}' is not writable ({code})",
                message_debug=str(error),
                cause=error,
            )
        if self.retry_policy.should_retry_code(code):
            return RetryableError(
                code=ErrorCode.STORAGE_UNAVAILABLE,
                message_safe=f"Object storage temporarily unavailable ({code})",
                message_debug=str(error),
                cause=error,
            )
        return TerminalError(
            code=ErrorCode.STORAGE_WRITE_ERROR,
            message_safe=f"Write of {bucket}/{object_name} rejected ({code or 'unknown'})",
            message_debug=str(error),
            cause=error,
        )


def _content_type(object_name: str) -> str:
    for extension, content_type in CONTENT_TYPES.items():
        if object_name.endswith(extension):
            return content_type
    return "application/octet-stream"


def get_storage_client() -> MinioStorageClient:
    """
    Factory function returning the settings-configured storage client.

    Returns:
        MinioStorageClient: Client bound to the shared MinIO connection.
    """
    return MinioStorageClient()
