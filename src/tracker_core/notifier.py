"""
Event notification used by every tracker listener registry.
"""

import asyncio
import inspect
from collections.abc import Callable
from typing import Any, Generic, List, Optional, TypeVar, Union

from .exceptions import ClosedError
from .utils.logger import LoggerLike, with_context

T = TypeVar("T")

Listener = Callable[[T], Any]
Unsubscribe = Callable[[], None]


class EventNotifier(Generic[T]):
    """
    Delivers events to registered listeners.

    Listeners are isolated from one another: an exception raised by a
    listener (or by the coroutine it returns) is handed to `on_error` when
    one is set, otherwise it is logged, and the remaining listeners still run.
    """

    def __init__(
        self,
        name: str = "notifier",
        on_error: Optional[Callable[[BaseException], Any]] = None,
        logger: Optional[LoggerLike] = None,
    ) -> None:
        self.name = name
        self._on_error = on_error
        self._listeners: List[Listener] = []
        self._waiters: List[asyncio.Future] = []
        self._closed = False
        self.logger = with_context(logger, "tracker_core.notifier", notifier=name)

    @property
    def active(self) -> bool:
        """Whether there is at least one listener or waiter"""
        return bool(self._listeners or self._waiters)

    @property
    def closed(self) -> bool:
        return self._closed

    def on_event(self, listener: Listener) -> Unsubscribe:
        """Register a listener; the returned callable removes it"""
        if self._closed:
            self.logger.debug("notifier is closed, listener ignored")
            return lambda: None

        # Wrapped so the same callable can be registered twice
        entry = _Registration(listener)
        self._listeners.append(entry)

        def unsubscribe() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)

        return unsubscribe

    def wait_for_event(self) -> "asyncio.Future[T]":
        """Future resolved with the next notified event"""
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        if self._closed:
            future.set_exception(ClosedError(self.name))
            return future

        self._waiters.append(future)
        return future

    def notify(self, event: Union[T, Callable[[], T]]) -> None:
        """
        Deliver an event.

        A zero-argument callable is treated as an event factory and only
        evaluated when somebody is listening.
        """
        if self._closed or not self.active:
            return

        value = event() if callable(event) else event

        for listener in list(self._listeners):
            try:
                outcome = listener(value)
            except Exception as error:
                self._report(error)
                continue

            if inspect.isawaitable(outcome):
                self._schedule(outcome)

        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(value)

    def close(self) -> None:
        """Drop all listeners and fail pending waiters"""
        if self._closed:
            return

        self._closed = True
        self._listeners.clear()

        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_exception(ClosedError(self.name))

    def _schedule(self, outcome: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as error:
            if inspect.iscoroutine(outcome):
                outcome.close()
            self._report(error)
            return

        task = asyncio.ensure_future(outcome, loop=loop)
        task.add_done_callback(self._report_task_failure)

    def _report_task_failure(self, task: asyncio.Future) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._report(error)

    def _report(self, error: BaseException) -> None:
        if self._on_error is None:
            self.logger.warning(
                "listener raised %s: %s",
                type(error).__name__,
                error,
                exc_info=(type(error), error, error.__traceback__),
            )
            return

        try:
            self._on_error(error)
        except Exception:
            self.logger.exception("error handler failed")


class _Registration:
    """Identity wrapper around a listener"""

    __slots__ = ("listener",)

    def __init__(self, listener: Listener) -> None:
        self.listener = listener

    def __call__(self, event: Any) -> Any:
        return self.listener(event)


__all__ = ["EventNotifier", "Listener", "Unsubscribe"]