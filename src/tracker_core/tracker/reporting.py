"""
Log bridges for trackers.

Subscribe a logger to the events of a tracker, so that invocations and
settlements show up in the application logs with structured fields.
"""

from typing import Optional

from ..exceptions import describe_error
from ..notifier import Unsubscribe
from ..schemas import (
    CompletedInvocation,
    ErroredInvocation,
    Invocation,
    PromiseSettledEvent,
    StartedInvocation,
)
from ..utils.logger import LoggerLike, with_context
from .invocation import InvocationTracker
from .promise import BasePromiseTracker


def log_invocations(
    tracker: InvocationTracker, logger: Optional[LoggerLike] = None
) -> Unsubscribe:
    """
    Log every invocation of a tracker.

    Started invocations are logged at DEBUG, completed ones at INFO with
    their duration, errored ones at ERROR with the error description.
    """
    log = with_context(logger, "tracker_core.invocations", tracker_id=tracker.id)

    def on_invoked(invocation: Invocation) -> None:
        fields = {
            "invocation_id": invocation.key.id,
            "operation": invocation.operation,
            "parent_id": invocation.parent_key.id if invocation.parent_key else None,
        }
        if invocation.tags:
            fields["tags"] = {tag.name: tag.value for tag in invocation.tags}

        if isinstance(invocation, StartedInvocation):
            log.debug("started %s", invocation.key.id, extra=fields)
        elif isinstance(invocation, CompletedInvocation):
            fields["duration_ms"] = round(invocation.duration, 3)
            fields["promise_like"] = invocation.promise_like
            log.info(
                "completed %s in %.3fms",
                invocation.key.id,
                invocation.duration,
                extra=fields,
            )
        elif isinstance(invocation, ErroredInvocation):
            fields["duration_ms"] = round(invocation.duration, 3)
            fields["promise_like"] = invocation.promise_like
            fields["error"] = describe_error(invocation.error)
            log.error(
                "errored %s with %s: %s",
                invocation.key.id,
                type(invocation.error).__name__,
                invocation.error,
                extra=fields,
            )

    return tracker.on_invoked(on_invoked)


def log_settlements(
    tracker: BasePromiseTracker, logger: Optional[LoggerLike] = None
) -> Unsubscribe:
    """Log every settlement of a promise tracker, failures at ERROR"""
    log = with_context(logger, "tracker_core.settlements", tracker_id=tracker.id)

    def on_settled(event: PromiseSettledEvent) -> None:
        fields = {"label": event.label, "duration_ms": round(event.duration, 3)}

        if event.rejected:
            error = event.result
            if isinstance(error, BaseException):
                fields["error"] = describe_error(error)
            log.error(
                "promise with label '%s' rejected in %.3fms: %r",
                event.label,
                event.duration,
                error,
                extra=fields,
            )
        else:
            log.info(
                "promise with label '%s' resolved in %.3fms",
                event.label,
                event.duration,
                extra=fields,
            )

    return tracker.on_settled(on_settled)
