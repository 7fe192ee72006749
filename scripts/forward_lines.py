#!/usr/bin/env python3
"""
CLI utility to forward newline-delimited records to object storage.

Each input line becomes one message. Settings (destination, prefix, size
limit, MinIO credentials) come from the environment or .env.

Usage:
    FORWARDER_DESTINATION_URI=s3://logs/app uv run scripts/forward_lines.py events.log
    tail -n 1000 app.log | uv run scripts/forward_lines.py --prefix app/ --format raw
"""

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.forwarder.factory import build_forwarder
from app.forwarder.result import ResultStatus
from app.forwarder.serializer import Message
from relay_core.config import settings
from relay_core.domain.exceptions import ForwarderError
from relay_core.logging import setup_logging


def read_messages(stream, source: str) -> list[Message]:
    return [
        Message(body=line.rstrip(b"\n"), message_id=f"{source}:{lineno}", source=source)
        for lineno, line in enumerate(stream, start=1)
        if line.strip()
    ]


def main():
    parser = argparse.ArgumentParser(description="Forward records to object storage")
    parser.add_argument("path", nargs="?", help="Input file (defaults to stdin)")
    parser.add_argument("--destination", help="Override FORWARDER_DESTINATION_URI")
    parser.add_argument("--prefix", help="Override FORWARDER_KEY_PREFIX")
    parser.add_argument("--size-limit", type=int, help="Override FORWARDER_SIZE_LIMIT (bytes)")
    parser.add_argument("--format", choices=["json", "raw"], help="Record format")
    parser.add_argument("--timeout", type=float, default=settings.FORWARDER_TIMEOUT_SECONDS)
    args = parser.parse_args()

    setup_logging(settings.LOG_LEVEL)

    overrides = {}
    if args.destination:
        overrides["destination_uri"] = args.destination
    if args.prefix is not None:
        overrides["key_prefix"] = args.prefix
    if args.size_limit is not None:
        overrides["size_limit"] = args.size_limit
    if args.format:
        overrides["record_format"] = args.format

    if args.path:
        with open(args.path, "rb") as f:
            messages = read_messages(f, Path(args.path).name)
    else:
        messages = read_messages(sys.stdin.buffer, "stdin")

    try:
        forwarder = build_forwarder(**overrides)
        result = forwarder.forward_sync(messages, timeout=args.timeout)
    except ForwarderError as e:
        print(str(e), file=sys.stderr)
        sys.exit(2)

    print(json.dumps(result.to_dict(), indent=2, default=str))
    if result.status not in (ResultStatus.SUCCEEDED, ResultStatus.EMPTY):
        sys.exit(1)


if __name__ == "__main__":
    main()
