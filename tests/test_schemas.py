"""
Schema Tests for tracker-core
"""

import pytest
from pydantic import ValidationError

from tracker_core.schemas import (
    CompletedInvocation,
    ErroredInvocation,
    InvocationKey,
    InvocationPhase,
    PromiseSettledEvent,
    StartedInvocation,
    Tag,
    is_at_phase,
    merge_tags,
    normalize_tags,
)


@pytest.fixture
def key():
    return InvocationKey.create("tracker_1", "save", 3)


class TestInvocationKey:
    """InvocationKey"""

    def test_create(self, key):
        assert key.id == "tracker_1.save.3"
        assert key.tracker_id == "tracker_1"
        assert key.operation == "save"
        assert key.index == 3

    def test_negative_index(self):
        with pytest.raises(ValidationError):
            InvocationKey(id="t.op.-1", tracker_id="t", operation="op", index=-1)

    def test_frozen(self, key):
        with pytest.raises(ValidationError):
            key.index = 4

    def test_hashable(self, key):
        assert {key, InvocationKey.create("tracker_1", "save", 3)} == {key}


class TestInvocations:
    """Invocation records"""

    def test_phases(self, key):
        started = StartedInvocation(key=key)
        completed = CompletedInvocation(key=key, duration=1.5, result="ok")
        errored = ErroredInvocation(key=key, duration=0.1, error=ValueError("bad"))

        assert started.phase == InvocationPhase.STARTED
        assert completed.phase == InvocationPhase.COMPLETED
        assert errored.phase == InvocationPhase.ERRORED
        assert started.operation == "save"
        assert completed.promise_like is False

    def test_is_at_phase(self, key):
        started = StartedInvocation(key=key)

        assert is_at_phase(started, "started")
        assert is_at_phase(started, InvocationPhase.STARTED)
        assert not is_at_phase(started, "completed")
        assert not is_at_phase(None, "started")

    def test_error_must_be_exception(self, key):
        with pytest.raises(ValidationError):
            ErroredInvocation(key=key, duration=0, error="not an exception")

    def test_negative_duration(self, key):
        with pytest.raises(ValidationError):
            CompletedInvocation(key=key, duration=-1)

    def test_settled_event(self):
        event = PromiseSettledEvent(label="a", duration=2.0, result=1)

        assert event.rejected is False
        assert event.result == 1


class TestTags:
    """Tag normalization"""

    def test_normalize_mapping(self):
        assert normalize_tags({"service": "auth", "retries": 3}) == (
            Tag(name="service", value="auth"),
            Tag(name="retries", value=3),
        )

    def test_normalize_pairs_and_tags(self):
        tags = normalize_tags([("a", "1"), Tag(name="b", value=True)])

        assert tags == (Tag(name="a", value="1"), Tag(name="b", value=True))

    def test_normalize_empty(self):
        assert normalize_tags(None) == ()
        assert normalize_tags({}) == ()

    def test_empty_name(self):
        with pytest.raises(ValidationError):
            Tag(name="", value="x")

    def test_merge_keeps_order_and_drops_duplicates(self):
        merged = merge_tags(
            {"service": "auth", "env": "prod"},
            [("feature", "signup"), ("service", "auth"), ("service", "billing")],
        )

        assert [(tag.name, tag.value) for tag in merged] == [
            ("service", "auth"),
            ("env", "prod"),
            ("feature", "signup"),
            ("service", "billing"),
        ]

    def test_merge_distinguishes_value_types(self):
        merged = merge_tags({"retries": 1}, {"retries": "1"})

        assert len(merged) == 2
