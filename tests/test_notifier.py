"""
Event Notifier Tests for tracker-core
"""

import asyncio

import pytest

from tracker_core import ClosedError, EventNotifier


class TestEventNotifier:
    """Listener registry"""

    def test_notify_listeners_in_order(self):
        notifier = EventNotifier()
        received = []
        notifier.on_event(lambda event: received.append(("first", event)))
        notifier.on_event(lambda event: received.append(("second", event)))

        notifier.notify("event")

        assert received == [("first", "event"), ("second", "event")]

    def test_same_listener_twice(self):
        notifier = EventNotifier()
        received = []

        unsubscribe = notifier.on_event(received.append)
        notifier.on_event(received.append)
        unsubscribe()
        notifier.notify(1)

        assert received == [1]

    def test_lazy_factory(self):
        """The factory only runs when somebody listens"""
        notifier = EventNotifier()
        built = []

        def factory():
            built.append(1)
            return "event"

        notifier.notify(factory)
        assert built == []

        received = []
        notifier.on_event(received.append)
        notifier.notify(factory)
        assert built == [1]
        assert received == ["event"]

    def test_active(self):
        notifier = EventNotifier()
        assert not notifier.active

        unsubscribe = notifier.on_event(lambda event: None)
        assert notifier.active

        unsubscribe()
        assert not notifier.active

    def test_error_handler(self):
        errors = []
        notifier = EventNotifier(on_error=errors.append)
        received = []

        def broken(event):
            raise ValueError("listener failure")

        notifier.on_event(broken)
        notifier.on_event(received.append)
        notifier.notify("event")

        assert received == ["event"]
        assert isinstance(errors[0], ValueError)

    def test_error_logged_without_handler(self, caplog):
        notifier = EventNotifier(name="test")

        def broken(event):
            raise ValueError("listener failure")

        notifier.on_event(broken)
        notifier.notify("event")

        assert "listener failure" in caplog.text

    @pytest.mark.asyncio
    async def test_async_listener_failure(self):
        errors = []
        notifier = EventNotifier(on_error=errors.append)

        async def broken(event):
            raise RuntimeError("async failure")

        notifier.on_event(broken)
        notifier.notify("event")
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert isinstance(errors[0], RuntimeError)

    @pytest.mark.asyncio
    async def test_wait_for_event(self):
        notifier = EventNotifier()

        waiter = notifier.wait_for_event()
        notifier.notify("event")

        assert await waiter == "event"

    @pytest.mark.asyncio
    async def test_close_fails_waiters(self):
        notifier = EventNotifier(name="settled")
        waiter = notifier.wait_for_event()

        notifier.close()

        with pytest.raises(ClosedError):
            await waiter
        with pytest.raises(ClosedError):
            await notifier.wait_for_event()

    def test_closed_notifier_ignores_listeners(self):
        notifier = EventNotifier()
        notifier.close()
        received = []

        notifier.on_event(received.append)
        notifier.notify("event")

        assert received == []
        assert notifier.closed
