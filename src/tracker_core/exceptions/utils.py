"""
Exception helpers for tracker-core

Turn arbitrary errors (the ones raised by tracked user code included) into
log-friendly dictionaries.
"""

import traceback
from typing import Any

from .base import ErrorCategory, ErrorSeverity, TrackerCoreError

# Detail keys never copied into reports, matched as whole names or name suffixes
SENSITIVE_KEYS = ("password", "token", "secret", "api_key", "credentials")


def is_sensitive_key(key: str) -> bool:
    """Whether a detail key names a secret, e.g. `password` or `api_token`"""
    name = key.lower()
    return any(
        name == sensitive or name.endswith(f"_{sensitive}")
        for sensitive in SENSITIVE_KEYS
    )


def describe_error(
    error: BaseException,
    include_traceback: bool = False,
    include_context: bool = False,
) -> dict[str, Any]:
    """
    Describe an error for structured logging

    Args:
        error: the error to describe, raised by tracker-core or by user code
        include_traceback: include the formatted traceback
        include_context: include the context of a TrackerCoreError
    """
    if isinstance(error, TrackerCoreError):
        description = error.to_dict()

        safe_details = {
            key: value
            for key, value in description.pop("details").items()
            if not is_sensitive_key(key)
        }
        if safe_details:
            description["details"] = safe_details

        context = description.pop("context")
        if include_context and context:
            description["context"] = context
    else:
        description = {
            "error_type": error.__class__.__name__,
            "message": str(error),
        }

    if include_traceback and error.__traceback__ is not None:
        description["traceback"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )

    return description


__all__ = [
    "ErrorCategory",
    "ErrorSeverity",
    "SENSITIVE_KEYS",
    "describe_error",
    "is_sensitive_key",
]
