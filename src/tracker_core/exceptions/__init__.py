"""
Exceptions Package for tracker-core

Errors raised by the toolkit itself and helpers to describe any error.
"""

from .base import (
    ClosedError,
    ConfigurationError,
    ErrorCategory,
    ErrorSeverity,
    NotCallableError,
    TrackerCoreError,
)
from .utils import describe_error, is_sensitive_key

__all__ = [
    # Enums
    "ErrorSeverity",
    "ErrorCategory",
    # Exceptions
    "TrackerCoreError",
    "ClosedError",
    "NotCallableError",
    "ConfigurationError",
    # Utilities
    "describe_error",
    "is_sensitive_key",
]
