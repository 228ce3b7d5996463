"""
Base Exception Classes for tracker-core

Errors raised by the toolkit itself. Errors raised by tracked user code are
never wrapped: they are observed, reported and re-raised unchanged.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Error category"""

    VALIDATION = "validation"
    LIFECYCLE = "lifecycle"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


class TrackerCoreError(Exception):
    """Base class of every exception raised by tracker-core"""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        context: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.details = details or {}
        self.cause = cause
        self.severity = severity
        self.category = category
        self.context = context or {}

        self.timestamp = datetime.now()

        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception into a dictionary"""
        result = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
            "context": self.context,
        }

        if self.cause:
            result["cause"] = str(self.cause)

        return result

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"


class ClosedError(TrackerCoreError):
    """A closed component was asked to deliver something it no longer can"""

    def __init__(
        self,
        component: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.component = component

        if message is None:
            message = f"{component} closed"

        details = kwargs.get("details", {})
        details["component"] = component

        kwargs["details"] = details
        kwargs["category"] = ErrorCategory.LIFECYCLE
        kwargs["severity"] = ErrorSeverity.LOW

        super().__init__(message, **kwargs)


class NotCallableError(TrackerCoreError):
    """A value that cannot be called was handed to a tracker"""

    def __init__(
        self,
        operation: str,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.operation = operation
        self.value = value

        message = (
            f"Cannot track operation '{operation}': "
            f"{type(value).__name__} is not callable"
        )

        details = kwargs.get("details", {})
        details.update(
            {
                "operation": operation,
                "value_type": type(value).__name__,
            }
        )

        kwargs["details"] = details
        kwargs["category"] = ErrorCategory.VALIDATION
        kwargs["severity"] = ErrorSeverity.LOW

        super().__init__(message, **kwargs)


class ConfigurationError(TrackerCoreError):
    """Invalid configuration value"""

    def __init__(
        self,
        config_key: str,
        message: str | None = None,
        expected_type: str | None = None,
        actual_value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.config_key = config_key
        self.expected_type = expected_type
        self.actual_value = actual_value

        if message is None:
            message = f"Configuration error for key '{config_key}'"
            if expected_type:
                message += f": expected {expected_type}"
            if actual_value is not None:
                message += f", got {type(actual_value).__name__}: {actual_value}"

        details = kwargs.get("details", {})
        details.update(
            {
                "config_key": config_key,
                "expected_type": expected_type,
                "actual_value": str(actual_value) if actual_value is not None else None,
            }
        )

        kwargs["details"] = details
        kwargs["category"] = ErrorCategory.CONFIGURATION
        kwargs["severity"] = ErrorSeverity.CRITICAL

        super().__init__(message, **kwargs)
