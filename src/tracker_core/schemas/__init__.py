"""
Schemas Package for tracker-core

Immutable records handed to tracker listeners.
"""

from .base import BaseSchema
from .invocation import (
    AnyInvocation,
    CompletedInvocation,
    ErroredInvocation,
    Invocation,
    InvocationKey,
    InvocationPhase,
    StartedInvocation,
    Tag,
    TagsInput,
    TagValue,
    is_at_phase,
    merge_tags,
    normalize_tags,
)
from .promise import PromiseSettledEvent

__all__ = [
    "BaseSchema",
    # Invocations
    "InvocationPhase",
    "InvocationKey",
    "Invocation",
    "StartedInvocation",
    "CompletedInvocation",
    "ErroredInvocation",
    "AnyInvocation",
    "is_at_phase",
    # Tags
    "Tag",
    "TagValue",
    "TagsInput",
    "normalize_tags",
    "merge_tags",
    # Promises
    "PromiseSettledEvent",
]
