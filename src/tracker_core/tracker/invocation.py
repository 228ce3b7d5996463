"""
Invocation tracking.

An `InvocationTracker` wraps callables so that every call emits a `started`
invocation followed by exactly one `completed` or `errored` invocation.
Parent/child relationships come from the tracker's invocation stack: the key
on top of the stack when a call starts becomes its `parent_key`.

Example:

    tracker = create_invocation_tracker(tags={"service": "auth"})
    tracker.on_completed(lambda inv: print(inv.key.operation, inv.duration))

    save_user = tracker.track("save_user", save_user, tags={"feature": "signup"})
    await save_user({"name": "Jane"})
"""

import asyncio
import functools
import inspect
import itertools
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any, Dict, Literal, Optional, Tuple, TypeVar, Union

from ..exceptions import NotCallableError
from ..notifier import EventNotifier, Listener, Unsubscribe
from ..schemas import (
    CompletedInvocation,
    ErroredInvocation,
    Invocation,
    InvocationKey,
    StartedInvocation,
    Tag,
    TagsInput,
    merge_tags,
    normalize_tags,
)
from ..utils.helpers import (
    describe_callable,
    elapsed_ms,
    generate_prefixed_id,
    is_awaitable,
    is_future,
    start_timer,
)
from ..utils.logger import ContextualLoggerAdapter, LoggerLike, with_context
from .stack import InvocationStack, create_invocation_stack

F = TypeVar("F", bound=Callable[..., Any])

# Attribute set on wrappers, holding the id of the tracker that made them
TRACKED_ATTRIBUTE = "__tracker_core_tracker_id__"


class _Call:
    """Everything an invocation record needs, captured when the call starts"""

    __slots__ = ("key", "parent_key", "tags", "args", "kwargs", "start", "logger")

    def __init__(
        self,
        key: InvocationKey,
        parent_key: Optional[InvocationKey],
        tags: Tuple[Tag, ...],
        args: Tuple[Any, ...],
        kwargs: Dict[str, Any],
        logger: ContextualLoggerAdapter,
    ) -> None:
        self.key = key
        self.parent_key = parent_key
        self.tags = tags
        self.args = args
        self.kwargs = kwargs
        self.logger = logger
        self.start = start_timer()

    def fields(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "parent_key": self.parent_key,
            "tags": self.tags,
            "args": self.args,
            "kwargs": self.kwargs,
        }


class InvocationTracker:
    """
    Observes invocations of the callables wrapped with `track`.

    Listeners registered with `on_invoked` see every invocation and are
    notified before the ones registered for a specific phase
    (`on_started`, `on_completed`, `on_errored`).

    Several trackers may share one stack; invocations then nest across
    trackers and a `parent_key` may carry another tracker's id. A stack
    passed in by the caller is not closed by `close()`.
    """

    def __init__(
        self,
        stack: Optional[InvocationStack] = None,
        tags: Optional[TagsInput] = None,
        logger: Optional[LoggerLike] = None,
    ) -> None:
        self.id = generate_prefixed_id("tracker")
        self.logger = with_context(logger, "tracker_core.invocation", tracker_id=self.id)
        self.tags = normalize_tags(tags)

        self._owns_stack = stack is None
        self.stack = stack if stack is not None else create_invocation_stack(logger=logger)

        self._counters: Dict[str, "itertools.count[int]"] = defaultdict(itertools.count)
        self._closed = False

        self._invoked: EventNotifier[Invocation] = EventNotifier(
            f"{self.id}.invoked", logger=logger
        )
        self._started: EventNotifier[StartedInvocation] = EventNotifier(
            f"{self.id}.started", logger=logger
        )
        self._completed: EventNotifier[CompletedInvocation] = EventNotifier(
            f"{self.id}.completed", logger=logger
        )
        self._errored: EventNotifier[ErroredInvocation] = EventNotifier(
            f"{self.id}.errored", logger=logger
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def on_invoked(self, listener: Listener) -> Unsubscribe:
        """Listen to invocations at every phase"""
        return self._invoked.on_event(listener)

    def on_started(self, listener: Listener) -> Unsubscribe:
        return self._started.on_event(listener)

    def on_completed(self, listener: Listener) -> Unsubscribe:
        return self._completed.on_event(listener)

    def on_errored(self, listener: Listener) -> Unsubscribe:
        return self._errored.on_event(listener)

    def close(self) -> None:
        """
        Stop notifying listeners. Already wrapped callables keep working,
        they just stop reporting.
        """
        if self._closed:
            return

        self.logger.debug("closing tracker")
        self._closed = True
        self._invoked.close()
        self._started.close()
        self._completed.close()
        self._errored.close()

        if self._owns_stack:
            self.stack.close()

    def __enter__(self) -> "InvocationTracker":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def is_tracked(self, value: Any) -> Union[Literal["this", "other"], Literal[False]]:
        """Whether `value` was wrapped by this tracker, another tracker, or none"""
        tracker_id = getattr(value, TRACKED_ATTRIBUTE, None) if callable(value) else None
        if not isinstance(tracker_id, str):
            return False
        return "this" if tracker_id == self.id else "other"

    def track(self, operation: str, fn: F, tags: Optional[TagsInput] = None) -> F:
        """
        Wrap `fn` so its invocations are tracked under `operation`.

        Returns `fn` itself when it is already tracked by this tracker (tags
        are not considered) or when the tracker is closed. Tags given here
        follow the tracker tags.

        A coroutine function is wrapped in a coroutine function; its
        invocation starts when the returned coroutine starts running.
        """
        if not callable(fn):
            raise NotCallableError(operation, fn)

        operation_logger = self.logger.add_context(operation=operation)

        if self._closed:
            operation_logger.debug("the tracker is closed")
            return fn

        if self.is_tracked(fn) == "this":
            return fn

        merged_tags = merge_tags(self.tags, tags)

        tracked: Callable[..., Any]
        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def tracked(*args: Any, **kwargs: Any) -> Any:
                return await self._invoke(
                    operation, fn, merged_tags, operation_logger, args, kwargs
                )

        else:

            @functools.wraps(fn)
            def tracked(*args: Any, **kwargs: Any) -> Any:
                return self._invoke(
                    operation, fn, merged_tags, operation_logger, args, kwargs
                )

        setattr(tracked, TRACKED_ATTRIBUTE, self.id)
        operation_logger.debug("tracking %s", describe_callable(fn))
        return tracked  # type: ignore[return-value]

    def tracked(
        self,
        operation: Union[str, Callable[..., Any], None] = None,
        *,
        tags: Optional[TagsInput] = None,
    ) -> Any:
        """
        Decorator form of `track`; the operation defaults to the qualified
        name of the decorated function.

            @tracker.tracked
            def load(): ...

            @tracker.tracked("store", tags={"layer": "db"})
            async def store(item): ...
        """
        if callable(operation):
            return self.track(describe_callable(operation), operation, tags=tags)

        def decorator(fn: F) -> F:
            return self.track(operation or describe_callable(fn), fn, tags=tags)

        return decorator

    def _invoke(
        self,
        operation: str,
        fn: Callable[..., Any],
        tags: Tuple[Tag, ...],
        logger: ContextualLoggerAdapter,
        args: Tuple[Any, ...],
        kwargs: Dict[str, Any],
    ) -> Any:
        index = next(self._counters[operation])
        key = InvocationKey.create(self.id, operation, index)
        parent_key = self.stack.peek()

        self.stack.push(key)

        call = _Call(key, parent_key, tags, args, kwargs, logger.add_context(index=index))
        call.logger.debug("starting with %d args", len(args) + len(kwargs))
        self._notify_started(call)

        call.start = start_timer()
        try:
            result = fn(*args, **kwargs)
        except BaseException as error:
            duration = elapsed_ms(call.start)
            self.stack.pop()
            call.logger.debug("an error was raised: %r", error)
            self._notify_errored(call, duration, False, error)
            raise

        if is_future(result):
            self.stack.pop()
            result.add_done_callback(functools.partial(self._settle_future, call))
            return result

        if is_awaitable(result):
            self.stack.pop()
            return self._settle(call, result)

        duration = elapsed_ms(call.start)
        self.stack.pop()
        call.logger.debug("completed")
        self._notify_completed(call, duration, False, result)
        return result

    async def _settle(self, call: _Call, awaitable: Awaitable[Any]) -> Any:
        # Re-entered while awaiting, so code resumed inside sees this key as parent
        self.stack.push(call.key)
        try:
            value = await awaitable
        except BaseException as error:
            duration = elapsed_ms(call.start)
            self.stack.pop()
            call.logger.debug("rejected: %r", error)
            self._notify_errored(call, duration, True, error)
            raise

        duration = elapsed_ms(call.start)
        self.stack.pop()
        call.logger.debug("resolved")
        self._notify_completed(call, duration, True, value)
        return value

    def _settle_future(self, call: _Call, future: "asyncio.Future[Any]") -> None:
        duration = elapsed_ms(call.start)
        if future.cancelled():
            call.logger.debug("cancelled")
            self._notify_errored(call, duration, True, asyncio.CancelledError())
            return

        error = future.exception()
        if error is not None:
            call.logger.debug("rejected: %r", error)
            self._notify_errored(call, duration, True, error)
        else:
            call.logger.debug("resolved")
            self._notify_completed(call, duration, True, future.result())

    def _notify_started(self, call: _Call) -> None:
        if self._invoked.active or self._started.active:
            invocation = StartedInvocation(**call.fields())
            self._invoked.notify(invocation)
            self._started.notify(invocation)

    def _notify_completed(
        self, call: _Call, duration: float, promise_like: bool, result: Any
    ) -> None:
        if self._invoked.active or self._completed.active:
            invocation = CompletedInvocation(
                **call.fields(),
                duration=duration,
                promise_like=promise_like,
                result=result,
            )
            self._invoked.notify(invocation)
            self._completed.notify(invocation)

    def _notify_errored(
        self, call: _Call, duration: float, promise_like: bool, error: BaseException
    ) -> None:
        if self._invoked.active or self._errored.active:
            invocation = ErroredInvocation(
                **call.fields(),
                duration=duration,
                promise_like=promise_like,
                error=error,
            )
            self._invoked.notify(invocation)
            self._errored.notify(invocation)


def create_invocation_tracker(
    stack: Optional[InvocationStack] = None,
    tags: Optional[TagsInput] = None,
    logger: Optional[LoggerLike] = None,
) -> InvocationTracker:
    """
    Create an invocation tracker.

    Args:
        stack: stack shared with other trackers; by default the tracker creates
            (and owns) one of the kind configured by `TRACKER_STACK`
        tags: tags added to every invocation of the tracker
        logger: logger for tracker trace lines
    """
    return InvocationTracker(stack=stack, tags=tags, logger=logger)
