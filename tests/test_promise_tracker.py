"""
Promise Tracker Tests for tracker-core
"""

import asyncio

import pytest

from tracker_core import PromiseSettledEvent, track_promises


class TestTrack:
    """Normalizing awaitables and suppliers into futures"""

    @pytest.mark.asyncio
    async def test_coroutine_becomes_task(self, promises):
        async def compute():
            return 5

        future = promises.track(compute(), label="compute")

        assert isinstance(future, asyncio.Task)
        assert await future == 5

    @pytest.mark.asyncio
    async def test_future_kept_as_is(self, promises):
        future = asyncio.get_running_loop().create_future()

        assert promises.track(future) is future
        future.set_result(None)

    @pytest.mark.asyncio
    async def test_supplier_returning_coroutine(self, promises):
        async def compute():
            return "value"

        assert await promises.track(compute, label="compute") == "value"

    @pytest.mark.asyncio
    async def test_supplier_raising(self, promises):
        """A synchronous raise becomes a failed future"""

        def supplier():
            raise ValueError("sync failure")

        future = promises.track(supplier)

        assert future.done()
        with pytest.raises(ValueError, match="sync failure"):
            await future

    @pytest.mark.asyncio
    async def test_supplier_returning_value(self, promises):
        future = promises.track(lambda: 3)

        assert future.done()
        assert await future == 3

    def test_requires_running_loop(self, promises):
        with pytest.raises(RuntimeError):
            promises.track(lambda: 3)


class TestSizeAndEvents:
    """size and on_settled"""

    @pytest.mark.asyncio
    async def test_size(self, promises):
        future = asyncio.get_running_loop().create_future()

        promises.track(future)
        assert promises.size == 1

        future.set_result(1)
        await asyncio.sleep(0)
        assert promises.size == 0

    @pytest.mark.asyncio
    async def test_same_future_tracked_once(self, promises):
        future = asyncio.get_running_loop().create_future()

        promises.track(future, label="a")
        promises.track(future, label="a")

        assert promises.size == 1
        future.cancel()

    @pytest.mark.asyncio
    async def test_resolved_event(self, promises):
        events = []
        promises.on_settled(events.append)

        await promises.track(asyncio.sleep(0, result="ok"), label="sleep")

        (event,) = events
        assert isinstance(event, PromiseSettledEvent)
        assert event.label == "sleep"
        assert event.rejected is False
        assert event.result == "ok"
        assert event.duration >= 0

    @pytest.mark.asyncio
    async def test_rejected_event(self, promises):
        events = []
        promises.on_settled(events.append)
        error = KeyError("missing")

        async def fail():
            raise error

        with pytest.raises(KeyError):
            await promises.track(fail(), label="fail")

        assert events[0].rejected is True
        assert events[0].result is error

    @pytest.mark.asyncio
    async def test_cancelled_is_rejected(self, promises):
        events = []
        promises.on_settled(events.append)
        future = asyncio.get_running_loop().create_future()

        promises.track(future, label="cancelled")
        future.cancel()
        await asyncio.sleep(0)

        assert events[0].rejected is True
        assert isinstance(events[0].result, asyncio.CancelledError)


class TestWait:
    """wait semantics"""

    @pytest.mark.asyncio
    async def test_nothing_tracked(self, promises):
        await asyncio.wait_for(promises.wait(), timeout=1)
        await asyncio.wait_for(promises.wait("a"), timeout=1)

    @pytest.mark.asyncio
    async def test_unknown_label_does_not_wait(self, promises):
        """Unknown labels never wait for other tracked futures"""
        never = asyncio.get_running_loop().create_future()
        promises.track(never, label="never")

        await asyncio.wait_for(promises.wait("a"), timeout=1)

        assert not never.done()
        never.cancel()

    @pytest.mark.asyncio
    async def test_wait_all(self, promises):
        results = []

        async def work(value):
            await asyncio.sleep(0)
            results.append(value)

        promises.track(work(1))
        promises.track(work(2), label="two")

        await promises.wait()

        assert sorted(results) == [1, 2]
        assert promises.size == 0

    @pytest.mark.asyncio
    async def test_wait_by_label(self, promises):
        slow = asyncio.get_running_loop().create_future()
        promises.track(slow, label="slow")
        fast = promises.track(asyncio.sleep(0, result="fast"), label="fast")

        await asyncio.wait_for(promises.wait("fast", "unknown"), timeout=1)

        assert fast.done()
        assert not slow.done()
        slow.set_result(None)

    @pytest.mark.asyncio
    async def test_wait_ignores_failures(self, promises):
        async def fail():
            raise RuntimeError("failure")

        future = promises.track(fail(), label="fail")

        await promises.wait("fail")

        assert isinstance(future.exception(), RuntimeError)

    @pytest.mark.asyncio
    async def test_wait_ignores_later_promises(self, promises):
        """Futures tracked after `wait` is called are not waited for"""
        loop = asyncio.get_running_loop()
        first = promises.track(asyncio.sleep(0), label="first")

        waiting = asyncio.ensure_future(promises.wait())
        later = loop.create_future()
        promises.track(later, label="later")

        await asyncio.wait_for(waiting, timeout=1)

        assert first.done()
        assert not later.done()
        later.cancel()

    @pytest.mark.asyncio
    async def test_wait_by_label_ignores_later_promises(self, promises):
        loop = asyncio.get_running_loop()
        promises.track(asyncio.sleep(0), label="job")

        waiting = asyncio.ensure_future(promises.wait("job"))
        later = loop.create_future()
        promises.track(later, label="job")

        await asyncio.wait_for(waiting, timeout=1)

        assert not later.done()
        later.cancel()

    @pytest.mark.asyncio
    async def test_factory(self):
        promises = track_promises()

        assert promises.size == 0
        assert promises.id.startswith("promises_")
