"""
tracker-core

Invocation and promise tracking for Python applications: observe calls of
sync and async functions with parent/child relationships, deduplicate
in-flight awaitables and memoize their results by label.
"""

import logging
import sys
from typing import Any

# Version information
__version__ = "0.1.0"
__description__ = "Invocation and promise tracking with context-aware call stacks"


def get_version() -> str:
    """Return the package version"""
    return __version__


def get_package_info() -> dict[str, Any]:
    """Return package information"""
    return {
        "name": "tracker-core",
        "version": __version__,
        "description": __description__,
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "supported_python": ">=3.10",
    }


# Silent unless the application configures logging
logging.getLogger("tracker_core").addHandler(logging.NullHandler())

# Core module imports
from . import exceptions, schemas, tracker, utils  # noqa: E402

# Essential Exception Exports
from .exceptions import (  # noqa: E402
    ClosedError,
    ConfigurationError,
    NotCallableError,
    TrackerCoreError,
    describe_error,
)
from .notifier import EventNotifier  # noqa: E402

# Essential Schema Exports
from .schemas import (  # noqa: E402
    CompletedInvocation,
    ErroredInvocation,
    Invocation,
    InvocationKey,
    InvocationPhase,
    PromiseSettledEvent,
    StartedInvocation,
    Tag,
    is_at_phase,
)

# Trackers
from .tracker import (  # noqa: E402
    BasicInvocationStack,
    ContextInvocationStack,
    InvocationStack,
    InvocationTracker,
    PromiseHolder,
    PromiseTracker,
    PromiseVault,
    create_invocation_stack,
    create_invocation_tracker,
    hold_promises,
    log_invocations,
    log_settlements,
    track_methods,
    track_promises,
    vault_promises,
)

# Essential Utility Exports
from .utils import configure_logging, get_logger, get_settings  # noqa: E402

__all__ = [
    # Package metadata
    "__version__",
    "__description__",
    "get_version",
    "get_package_info",
    # Core modules (for advanced usage)
    "exceptions",
    "schemas",
    "tracker",
    "utils",
    # Stacks
    "InvocationStack",
    "BasicInvocationStack",
    "ContextInvocationStack",
    "create_invocation_stack",
    # Invocation tracking
    "InvocationTracker",
    "create_invocation_tracker",
    "track_methods",
    "log_invocations",
    # Promise tracking
    "PromiseTracker",
    "PromiseHolder",
    "PromiseVault",
    "track_promises",
    "hold_promises",
    "vault_promises",
    "log_settlements",
    # Records
    "InvocationKey",
    "InvocationPhase",
    "Invocation",
    "StartedInvocation",
    "CompletedInvocation",
    "ErroredInvocation",
    "PromiseSettledEvent",
    "Tag",
    "is_at_phase",
    # Events
    "EventNotifier",
    # Exceptions
    "TrackerCoreError",
    "ClosedError",
    "NotCallableError",
    "ConfigurationError",
    "describe_error",
    # Utilities
    "get_settings",
    "get_logger",
    "configure_logging",
]
