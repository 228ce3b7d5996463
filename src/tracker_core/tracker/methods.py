"""
Bulk method tracking.
"""

import inspect
from collections.abc import Iterable
from typing import Any, FrozenSet, Optional

from ..schemas import TagsInput
from ..utils.logger import get_logger
from .invocation import InvocationTracker

logger = get_logger("tracker_core.methods")

_BUILTIN_CONTAINERS = (dict, list, tuple, set, frozenset, str, bytes, bytearray)


def _is_builtin(target: Any) -> bool:
    if inspect.isclass(target):
        return issubclass(target, _BUILTIN_CONTAINERS)
    return isinstance(target, _BUILTIN_CONTAINERS)


def _candidate_names(target: Any, include_constructor: bool) -> Iterable[str]:
    for name in dir(target):
        if name == "__init__" and include_constructor:
            yield name
        elif not name.startswith("_"):
            yield name


def _replacement(
    tracker: InvocationTracker,
    target: Any,
    name: str,
    static_value: Any,
    value: Any,
    tags: Optional[TagsInput],
) -> Any:
    """
    Tracked replacement of a member, or None when it must be left alone.

    On a class the replacement keeps the binding of the original member:
    static and class methods are wrapped again in their descriptor type and
    plain functions stay functions, so instances still bind `self`.
    """
    if not inspect.isclass(target):
        if tracker.is_tracked(value) == "this":
            return None
        return tracker.track(name, value, tags=tags)

    if isinstance(static_value, (staticmethod, classmethod)):
        fn = static_value.__func__
        if tracker.is_tracked(fn) == "this":
            return None
        return type(static_value)(tracker.track(name, fn, tags=tags))

    if inspect.isfunction(static_value):
        if tracker.is_tracked(static_value) == "this":
            return None
        return tracker.track(name, static_value, tags=tags)

    # Other descriptors bind in their own way
    return None


def track_methods(
    tracker: InvocationTracker,
    target: Any,
    methods: Optional[Iterable[str]] = None,
    include_constructor: bool = False,
    track_builtin: bool = False,
    tags: Optional[TagsInput] = None,
) -> FrozenSet[str]:
    """
    Replace methods of `target` with tracked versions, in place.

    Each method is tracked under its own name. Properties, non-callable
    attributes and private names are skipped; `__init__` only when
    `include_constructor` is set. Plain built-in objects (dicts, lists, ...)
    are left alone unless `track_builtin` is set. On a class, static and class
    methods stay static and class methods.

    Args:
        tracker: tracker that wraps the methods
        target: object (or class) whose methods are replaced
        methods: explicit method names; default is every public method
        include_constructor: also track `__init__`
        track_builtin: allow tracking built-in objects
        tags: tags added to every tracked method

    Returns:
        Names of the methods that were replaced
    """
    if target is None:
        return frozenset()

    if not track_builtin and _is_builtin(target):
        logger.debug("skipping built-in object of type %s", type(target).__name__)
        return frozenset()

    names = list(methods) if methods is not None else list(
        _candidate_names(target, include_constructor)
    )

    tracked = set()
    for name in names:
        try:
            static_value = inspect.getattr_static(target, name)
        except AttributeError:
            logger.debug("no attribute '%s' to track", name)
            continue

        if isinstance(static_value, property):
            continue

        value = getattr(target, name)
        if not callable(value) or inspect.isclass(value):
            continue

        replacement = _replacement(tracker, target, name, static_value, value, tags)
        if replacement is None:
            continue

        try:
            setattr(target, name, replacement)
        except (AttributeError, TypeError) as error:
            logger.debug("cannot replace '%s': %s", name, error)
            continue

        tracked.add(name)

    logger.debug("tracked %d methods of %s", len(tracked), type(target).__name__)
    return frozenset(tracked)
