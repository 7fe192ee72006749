"""Unit tests for storage key generation."""

from datetime import datetime, timedelta, timezone

import pytest

from app.forwarder.keys import KeyGenerator
from relay_core.runtime.context import RunContext

STARTED = datetime(2026, 10, 19, 8, 5, 30, tzinfo=timezone.utc)


@pytest.fixture
def context():
    return RunContext(request_id="req-1", started_at=STARTED)


class TestKeyGenerator:
    """Tests for KeyGenerator.next_key()."""

    def test_key_format(self, context):
        """Keys should be prefix, UTC hour path, request id and padded index."""
        key = KeyGenerator().next_key("logs/", 3, context)

        assert key == "logs/2026/10/19/08/req-1-000003.jsonl"

    def test_raw_extension(self, context):
        assert KeyGenerator("raw").next_key("", 0, context).endswith("-000000.log")

    def test_prefix_used_verbatim(self, context):
        """The prefix should be prepended exactly as given."""
        assert KeyGenerator().next_key("app-", 0, context).startswith("app-2026/")

    def test_deterministic(self, context):
        """Same inputs should give the same key."""
        generator = KeyGenerator()

        assert generator.next_key("p/", 1, context) == generator.next_key("p/", 1, context)

    def test_unique_within_call(self, context):
        keys = KeyGenerator().keys_for("p/", 1000, context)

        assert len(set(keys)) == 1000

    def test_keys_sort_in_block_order(self, context):
        """Lexical order of keys should match block order."""
        keys = KeyGenerator().keys_for("p/", 120, context)

        assert sorted(keys) == keys

    def test_unique_across_calls(self):
        """Two calls started at the same moment should not collide."""
        first = RunContext(started_at=STARTED)
        second = RunContext(started_at=STARTED)

        generator = KeyGenerator()
        assert generator.next_key("p/", 0, first) != generator.next_key("p/", 0, second)

    def test_chronological_across_calls(self):
        """Later calls should sort after earlier ones."""
        earlier = RunContext(request_id="zzz", started_at=STARTED)
        later = RunContext(request_id="aaa", started_at=STARTED + timedelta(hours=1))

        generator = KeyGenerator()
        assert generator.next_key("p/", 0, earlier) < generator.next_key("p/", 0, later)

    def test_converts_to_utc(self):
        """Non-UTC start times should be normalised to UTC."""
        local = STARTED.astimezone(timezone(timedelta(hours=-5)))
        context = RunContext(request_id="r", started_at=local)

        assert "/2026/10/19/08/" in "/" + KeyGenerator().next_key("", 0, context)

    def test_negative_index_rejected(self, context):
        with pytest.raises(ValueError):
            KeyGenerator().next_key("p/", -1, context)
