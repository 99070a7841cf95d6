"""Tests for the event bus."""

import pytest

from scriptupd.domain.events import EventBus, ScriptUpdateProgress, UpdateBatchCompleted


def progress(message="Checking"):
    return ScriptUpdateProgress(script_id=1, message=message, checking=True)


class TestEventBus:
    def test_publish_to_subscribers_of_type(self):
        bus = EventBus()
        received = []
        bus.subscribe(ScriptUpdateProgress, received.append)

        bus.publish(progress())
        bus.publish(UpdateBatchCompleted(checked=1, updated=0, notes=0, auto=True))

        assert [e.message for e in received] == ["Checking"]

    def test_subscribe_twice_delivers_once(self):
        bus = EventBus()
        received = []
        bus.subscribe(ScriptUpdateProgress, received.append)
        bus.subscribe(ScriptUpdateProgress, received.append)

        bus.publish(progress())

        assert len(received) == 1

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        bus.subscribe(ScriptUpdateProgress, received.append)
        bus.unsubscribe(ScriptUpdateProgress, received.append)
        bus.unsubscribe(ScriptUpdateProgress, received.append)

        bus.publish(progress())

        assert received == []
        assert not bus.has_subscribers(ScriptUpdateProgress)

    def test_async_handler_rejected(self):
        bus = EventBus()

        async def handler(event):
            pass

        with pytest.raises(TypeError):
            bus.subscribe(ScriptUpdateProgress, handler)

    def test_failing_handler_is_isolated(self):
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(ScriptUpdateProgress, broken)
        bus.subscribe(ScriptUpdateProgress, received.append)
        bus.publish(progress())

        assert len(received) == 1

    def test_clear(self):
        bus = EventBus()
        bus.subscribe(ScriptUpdateProgress, lambda e: None)
        bus.clear()

        assert not bus.has_subscribers(ScriptUpdateProgress)
