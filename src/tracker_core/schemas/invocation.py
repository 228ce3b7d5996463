"""
Invocation records emitted by invocation trackers.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Literal, Optional, Tuple, Union

from pydantic import Field

from .base import BaseSchema

TagValue = Union[str, int, float, bool]
TagsInput = Union[
    Mapping[str, TagValue],
    Iterable[Union["Tag", Tuple[str, TagValue]]],
]


class InvocationPhase(str, Enum):
    """Lifecycle phase of an invocation"""

    STARTED = "started"
    COMPLETED = "completed"
    ERRORED = "errored"


class Tag(BaseSchema):
    """Key-value metadata attached to invocations, e.g. `service=auth`"""

    name: str = Field(..., min_length=1, description="Tag name")
    value: TagValue = Field(..., description="Tag value")


class InvocationKey(BaseSchema):
    """Identity of one concrete call of a tracked operation"""

    id: str = Field(..., description="Unique id: <tracker_id>.<operation>.<index>")
    tracker_id: str = Field(..., description="Id of the tracker that created the key")
    operation: str = Field(..., description="Logical name of the tracked operation")
    index: int = Field(
        ..., ge=0, description="Zero-based call counter of the operation in its tracker"
    )

    @classmethod
    def create(cls, tracker_id: str, operation: str, index: int) -> InvocationKey:
        return cls(
            id=f"{tracker_id}.{operation}.{index}",
            tracker_id=tracker_id,
            operation=operation,
            index=index,
        )


class Invocation(BaseSchema):
    """
    One observed call of a tracked operation.

    `parent_key` is the key that was on top of the invocation stack when the
    call started; it may belong to another tracker sharing the same stack.
    """

    key: InvocationKey
    parent_key: Optional[InvocationKey] = Field(
        default=None, description="Key of the enclosing invocation, if any"
    )
    tags: Tuple[Tag, ...] = Field(
        default=(), description="Tracker tags followed by operation tags"
    )
    args: Tuple[Any, ...] = Field(default=(), description="Positional arguments")
    kwargs: dict[str, Any] = Field(default_factory=dict, description="Keyword arguments")
    phase: InvocationPhase

    @property
    def operation(self) -> str:
        return self.key.operation


class StartedInvocation(Invocation):
    phase: Literal[InvocationPhase.STARTED] = InvocationPhase.STARTED


class CompletedInvocation(Invocation):
    phase: Literal[InvocationPhase.COMPLETED] = InvocationPhase.COMPLETED
    duration: float = Field(..., ge=0, description="Elapsed time in milliseconds")
    result: Any = Field(default=None, description="Returned or resolved value")
    promise_like: bool = Field(
        default=False, description="Whether the call returned an awaitable"
    )


class ErroredInvocation(Invocation):
    phase: Literal[InvocationPhase.ERRORED] = InvocationPhase.ERRORED
    duration: float = Field(..., ge=0, description="Elapsed time in milliseconds")
    error: BaseException = Field(..., description="Raised exception")
    promise_like: bool = Field(
        default=False, description="Whether the call returned an awaitable"
    )


AnyInvocation = Union[StartedInvocation, CompletedInvocation, ErroredInvocation]


def is_at_phase(
    invocation: Optional[Invocation], phase: Union[InvocationPhase, str]
) -> bool:
    """Whether the invocation is at the given phase (None is never at any phase)"""
    return invocation is not None and invocation.phase == InvocationPhase(phase)


def normalize_tags(tags: Optional[TagsInput]) -> Tuple[Tag, ...]:
    """Convert a mapping, a sequence of pairs or a sequence of tags into tags"""
    if not tags:
        return ()

    if isinstance(tags, Mapping):
        return tuple(Tag(name=name, value=value) for name, value in tags.items())

    normalized = []
    for tag in tags:
        if isinstance(tag, Tag):
            normalized.append(tag)
        else:
            name, value = tag
            normalized.append(Tag(name=name, value=value))
    return tuple(normalized)


def merge_tags(*groups: Optional[TagsInput]) -> Tuple[Tag, ...]:
    """
    Concatenate tag groups in order, dropping repeated name/value pairs.

    Tags with the same name but different values are all kept.
    """
    merged = []
    seen = set()
    for group in groups:
        for tag in normalize_tags(group):
            identity = (tag.name, type(tag.value), tag.value)
            if identity not in seen:
                seen.add(identity)
                merged.append(tag)
    return tuple(merged)
