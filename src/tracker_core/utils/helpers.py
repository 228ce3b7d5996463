"""
Helper Utilities for tracker-core

Identifier generation, timing and awaitable detection.
"""

import asyncio
import inspect
import time
import uuid
from typing import Any


def generate_uuid_hex() -> str:
    """UUID4 without dashes"""
    return uuid.uuid4().hex


def generate_prefixed_id(prefix: str, length: int = 12) -> str:
    """
    Short random id with a prefix

    Args:
        prefix: id prefix
        length: number of hex characters after the prefix

    Returns:
        `<prefix>_<hex>`
    """
    return f"{prefix}_{generate_uuid_hex()[:length]}"


def start_timer() -> float:
    """Monotonic start mark for `elapsed_ms`"""
    return time.perf_counter()


def elapsed_ms(start: float) -> float:
    """Milliseconds elapsed since a `start_timer()` mark"""
    return (time.perf_counter() - start) * 1000


def is_awaitable(value: Any) -> bool:
    """Whether the value can be awaited (coroutines, futures, tasks, custom awaitables)"""
    return inspect.isawaitable(value)


def is_future(value: Any) -> bool:
    """Whether the value is an asyncio future (tasks included)"""
    return asyncio.isfuture(value)


def describe_callable(fn: Any) -> str:
    """Readable name of a callable for logs"""
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)
