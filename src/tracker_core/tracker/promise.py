"""
Promise tracking.

Trackers that follow awaitables until they settle. Everything is normalized
into an `asyncio.Future`: coroutines are scheduled as tasks, futures are kept
as-is, and suppliers (zero-argument callables) are called first, a
synchronous raise becoming an already-failed future.

- `PromiseTracker` follows any awaitable and can wait for them by label.
- `PromiseHolder` shares the in-flight future of a label between callers.
- `PromiseVault` also keeps settled futures, memoizing by label.

All of them must be used from a running event loop.
"""

import asyncio
import functools
from collections.abc import Awaitable, Callable
from typing import Any, Dict, FrozenSet, List, Optional, Union

from ..notifier import EventNotifier, Listener, Unsubscribe
from ..schemas import PromiseSettledEvent
from ..utils.config import get_settings
from ..utils.helpers import (
    elapsed_ms,
    generate_prefixed_id,
    is_awaitable,
    is_future,
    start_timer,
)
from ..utils.logger import LoggerLike, with_context

PromiseLike = Union[Awaitable[Any], Callable[[], Any]]


async def _wait_for(pending: FrozenSet["asyncio.Future[Any]"]) -> None:
    if pending:
        await asyncio.wait(pending)


class BasePromiseTracker:
    """Follows futures until they settle and reports each settlement"""

    def __init__(self, logger: Optional[LoggerLike] = None) -> None:
        self.id = generate_prefixed_id("promises")
        self.logger = with_context(logger, "tracker_core.promise", tracker_id=self.id)
        self._pending: Dict["asyncio.Future[Any]", Optional[str]] = {}
        self._settled: EventNotifier[PromiseSettledEvent] = EventNotifier(
            f"{self.id}.settled", logger=logger
        )

    @property
    def size(self) -> int:
        """Number of tracked futures not settled yet"""
        return len(self._pending)

    def on_settled(self, listener: Listener) -> Unsubscribe:
        return self._settled.on_event(listener)

    def wait(self, *labels: str) -> Awaitable[None]:
        """
        Wait until the futures pending at call time settle.

        The set of futures is taken when `wait` is called, so futures tracked
        afterwards are never waited for. With labels, only pending futures
        carrying one of them are awaited; unknown labels are ignored.
        Outcomes are never raised from here.
        """
        if labels:
            wanted = set(labels)
            pending = {
                future for future, label in self._pending.items() if label in wanted
            }
        else:
            pending = set(self._pending)

        return _wait_for(frozenset(pending))

    def _track(self, promise: PromiseLike, label: Optional[str]) -> "asyncio.Future[Any]":
        start = start_timer()
        future = self._to_future(promise, label)
        if future in self._pending:
            return future

        self._pending[future] = label
        future.add_done_callback(functools.partial(self._on_done, label, start))
        return future

    def _to_future(self, promise: PromiseLike, label: Optional[str]) -> "asyncio.Future[Any]":
        loop = asyncio.get_running_loop()

        if not is_awaitable(promise) and callable(promise):
            self.logger.debug("tracking a promise supplier with label '%s'", label)
            try:
                promise = promise()
            except Exception as error:
                failed = loop.create_future()
                failed.set_exception(error)
                return failed
        else:
            self.logger.debug("tracking a promise with label '%s'", label)

        if is_future(promise):
            return promise
        if is_awaitable(promise):
            return asyncio.ensure_future(promise)

        resolved = loop.create_future()
        resolved.set_result(promise)
        return resolved

    def _on_done(
        self, label: Optional[str], start: float, future: "asyncio.Future[Any]"
    ) -> None:
        duration = elapsed_ms(start)
        self._pending.pop(future, None)

        result: Any
        if future.cancelled():
            rejected, result = True, asyncio.CancelledError()
        else:
            error = future.exception()
            if error is not None:
                rejected, result = True, error
            else:
                rejected, result = False, future.result()

        self.logger.debug(
            "promise with label '%s' %s in %.3fms",
            label,
            "rejected" if rejected else "resolved",
            duration,
        )

        self._settled.notify(
            lambda: PromiseSettledEvent(
                label=label, duration=duration, rejected=rejected, result=result
            )
        )


class PromiseTracker(BasePromiseTracker):
    """
    Tracks awaitables, optionally labelled.

        promises = track_promises()
        promises.track(send_email(user), label="email")
        promises.track(lambda: refresh_cache(), label="cache")

        await promises.wait("email")
    """

    def track(
        self, promise: PromiseLike, label: Optional[str] = None
    ) -> "asyncio.Future[Any]":
        """Track an awaitable or a supplier and return the resulting future"""
        return self._track(promise, label)


class PromiseHolder(BasePromiseTracker):
    """
    Shares the in-flight future of a label.

    While a future is pending under a label, `track` returns it without
    calling the new supplier. The label is released once the future settles,
    whether it resolved or failed.
    """

    def __init__(self, logger: Optional[LoggerLike] = None) -> None:
        super().__init__(logger=logger)
        self._held: Dict[str, "asyncio.Future[Any]"] = {}

    def has(self, label: str) -> bool:
        """Whether a future is in flight for the label"""
        return label in self._held

    def track(self, label: str, supplier: PromiseLike) -> "asyncio.Future[Any]":
        held = self._held.get(label)
        if held is not None:
            self.logger.debug("promise with label '%s' is already in flight", label)
            return held

        future = self._track(supplier, label)
        self._held[label] = future
        future.add_done_callback(functools.partial(self._release, label))
        return future

    def _release(self, label: str, future: "asyncio.Future[Any]") -> None:
        if self._held.get(label) is future:
            del self._held[label]


class PromiseVault(BasePromiseTracker):
    """
    Memoizes futures by label.

    The first `track` of a label calls the supplier; later calls get the same
    future, in flight or settled, until the label is forgotten. With
    `forget_on_rejection` a failed future is dropped as soon as it fails so
    the next call retries.

    A future forgotten while in flight still settles and emits its settlement
    event, but never evicts an entry created after it.
    """

    def __init__(
        self, forget_on_rejection: bool = False, logger: Optional[LoggerLike] = None
    ) -> None:
        super().__init__(logger=logger)
        self.forget_on_rejection = forget_on_rejection
        self._vault: Dict[str, "asyncio.Future[Any]"] = {}

    @property
    def size(self) -> int:
        """Number of cached entries, settled or not"""
        return len(self._vault)

    def has(self, label: str) -> bool:
        return label in self._vault

    def labels(self) -> List[str]:
        """Cached labels, oldest first"""
        return list(self._vault)

    def track(self, label: str, supplier: PromiseLike) -> "asyncio.Future[Any]":
        cached = self._vault.get(label)
        if cached is not None:
            self.logger.debug("promise with label '%s' found in vault", label)
            return cached

        future = self._track(supplier, label)
        self._vault[label] = future
        future.add_done_callback(functools.partial(self._evict_rejected, label))
        return future

    def forget(self, label: str) -> bool:
        """Drop the entry of a label; False when there was none"""
        if self._vault.pop(label, None) is None:
            return False

        self.logger.debug("forgot promise with label '%s'", label)
        return True

    def clear(self) -> None:
        """Drop every entry, in flight ones included"""
        self.logger.debug("clearing %d promises", len(self._vault))
        self._vault.clear()

    def _evict_rejected(self, label: str, future: "asyncio.Future[Any]") -> None:
        if not self.forget_on_rejection:
            return
        if not future.cancelled() and future.exception() is None:
            return

        if self._vault.get(label) is future:
            self.logger.debug("forgetting rejected promise with label '%s'", label)
            del self._vault[label]


def track_promises(logger: Optional[LoggerLike] = None) -> PromiseTracker:
    return PromiseTracker(logger=logger)


def hold_promises(logger: Optional[LoggerLike] = None) -> PromiseHolder:
    return PromiseHolder(logger=logger)


def vault_promises(
    forget_on_rejection: Optional[bool] = None, logger: Optional[LoggerLike] = None
) -> PromiseVault:
    """
    Create a promise vault.

    Args:
        forget_on_rejection: drop failed futures; defaults to the
            `TRACKER_FORGET_ON_REJECTION` setting
        logger: logger for trace lines
    """
    if forget_on_rejection is None:
        forget_on_rejection = get_settings().tracker.forget_on_rejection
    return PromiseVault(forget_on_rejection=forget_on_rejection, logger=logger)
