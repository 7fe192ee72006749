"""Unit tests for the SQS batch handler."""

from app.forwarder.config import ForwarderConfig
from app.forwarder.forwarder import Forwarder
from app.forwarder.handler import handle_sqs_event, messages_from_event
from relay_core.runtime.context import RunContext
from relay_core.runtime.errors import ErrorCode, FatalDestinationError, TerminalError
from tests.app.forwarder.fakes import FakeStorageClient

QUEUE_ARN = "arn:aws:sqs:us-east-1:123456789012:forwarder"


def sqs_event(*bodies: str) -> dict:
    return {
        "Records": [
            {
                "messageId": f"id-{i}",
                "body": body,
                "attributes": {"ApproximateFirstReceiveTimestamp": "1760860800000"},
                "eventSourceARN": QUEUE_ARN,
            }
            for i, body in enumerate(bodies)
        ]
    }


def make_forwarder(client, **overrides) -> Forwarder:
    values = {
        "destination_uri": "s3://bucket/sqs",
        "key_prefix": "sqs/",
        "size_limit": 1024,
        "storage_client": client,
        "record_format": "raw",
        "max_concurrency": 1,
    }
    values.update(overrides)
    return Forwarder(ForwarderConfig(**values))


class TestHandleSqsEvent:
    """Tests for handle_sqs_event()."""

    def test_all_stored(self):
        """A fully stored batch should report no failures."""
        client = FakeStorageClient()

        response = handle_sqs_event(sqs_event("a", "b", "c"), make_forwarder(client))

        assert response == {"batchItemFailures": []}
        assert list(client.objects.values()) == [b"a\nb\nc\n"]

    def test_empty_event(self):
        client = FakeStorageClient()

        response = handle_sqs_event({"Records": []}, make_forwarder(client))

        assert response == {"batchItemFailures": []}
        assert client.calls == []

    def test_request_id_names_objects(self):
        """The invocation request id should appear in the stored key."""
        client = FakeStorageClient()

        context = RunContext.for_invocation("lambda-req-1", source=QUEUE_ARN)

        handle_sqs_event(sqs_event("a"), make_forwarder(client), context=context)

        assert "lambda-req-1-000000.log" in client.stored_keys()[0]

    def test_reports_unstored_messages(self):
        """Messages of failed and aborted blocks should be returned for redelivery."""
        fatal = FatalDestinationError(code=ErrorCode.DESTINATION_NOT_FOUND, message_safe="gone")
        client = FakeStorageClient(errors={"-000001.log": fatal})
        # "aaaa\n" is 5 bytes: two messages per block
        forwarder = make_forwarder(client, size_limit=10)

        response = handle_sqs_event(
            sqs_event("aaaa", "bbbb", "cccc", "dddd", "eeee", "ffff"), forwarder
        )

        assert response == {
            "batchItemFailures": [
                {"itemIdentifier": "id-2"},
                {"itemIdentifier": "id-3"},
                {"itemIdentifier": "id-4"},
                {"itemIdentifier": "id-5"},
            ]
        }

    def test_oversize_message_does_not_block_neighbours(self):
        """Only the message that can never fit should be returned; the rest are stored."""
        client = FakeStorageClient()
        forwarder = make_forwarder(client, size_limit=200)
        event = sqs_event("good-1", "x" * 500, "good-2")

        response = handle_sqs_event(event, forwarder)

        assert response == {"batchItemFailures": [{"itemIdentifier": "id-1"}]}
        assert list(client.objects.values()) == [b"good-1\ngood-2\n"]

    def test_redelivered_oversize_message_stays_isolated(self):
        """Each redelivery should store the good messages and return only the oversize one."""
        client = FakeStorageClient()
        forwarder = make_forwarder(client, size_limit=200)
        event = sqs_event("good-1", "x" * 500, "good-2")

        responses = [handle_sqs_event(event, forwarder) for _ in range(3)]

        assert all(r == {"batchItemFailures": [{"itemIdentifier": "id-1"}]} for r in responses)
        assert len(client.objects) == 3

    def test_all_oversize(self):
        client = FakeStorageClient()
        forwarder = make_forwarder(client, size_limit=4)

        response = handle_sqs_event(sqs_event("far too long", "also too long"), forwarder)

        assert response == {
            "batchItemFailures": [{"itemIdentifier": "id-0"}, {"itemIdentifier": "id-1"}]
        }
        assert client.calls == []

    def test_oversize_and_failed_block_both_reported(self):
        """Oversize ids and ids of unstored blocks should come back in record order."""
        rejected = TerminalError(code=ErrorCode.STORAGE_WRITE_ERROR, message_safe="rejected")
        client = FakeStorageClient(errors={"-000000.log": rejected})
        forwarder = make_forwarder(client, size_limit=10)

        response = handle_sqs_event(sqs_event("aaaa", "x" * 50, "bbbb"), forwarder)

        assert response == {
            "batchItemFailures": [
                {"itemIdentifier": "id-0"},
                {"itemIdentifier": "id-1"},
                {"itemIdentifier": "id-2"},
            ]
        }


class TestMessagesFromEvent:
    def test_keeps_record_order(self):
        messages = messages_from_event(sqs_event("first", "second"))

        assert [m.body for m in messages] == [b"first", b"second"]
        assert all(m.source == QUEUE_ARN for m in messages)

    def test_missing_records(self):
        assert messages_from_event({}) == []
