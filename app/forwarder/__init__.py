# Forwarder services

from .config import Destination, ForwarderConfig, parse_destination, validate_config
from .forwarder import Forwarder
from .handler import handle_sqs_event
from .keys import KeyGenerator
from .result import BlockOutcome, BlockStatus, ForwardingResult, ResultStatus, SkipReason
from .serializer import BlockSerializer, Message, PayloadBlock, encode_record, serialize
from .storage import MinioStorageClient, get_storage_client
from .storage_protocol import ForwarderLogger, NullLogger, StorageClient
from .writer import StorageWriter

__all__ = [
    # Configuration
    "ForwarderConfig",
    "Destination",
    "parse_destination",
    "validate_config",
    # Pipeline
    "Message",
    "PayloadBlock",
    "BlockSerializer",
    "encode_record",
    "serialize",
    "KeyGenerator",
    "StorageWriter",
    "Forwarder",
    "handle_sqs_event",
    # Results
    "ForwardingResult",
    "BlockOutcome",
    "BlockStatus",
    "SkipReason",
    "ResultStatus",
    # Storage
    "StorageClient",
    "MinioStorageClient",
    "get_storage_client",
    "ForwarderLogger",
    "NullLogger",
]
