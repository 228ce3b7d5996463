"""
Utils Package for tracker-core

Configuration, logging setup and small helpers.
"""

# Configuration Management
from .config import (
    BaseTrackerSettings,
    LoggingSettings,
    Settings,
    TrackerSettings,
    get_settings,
)

# Helper Functions
from .helpers import (
    describe_callable,
    elapsed_ms,
    generate_prefixed_id,
    generate_uuid_hex,
    is_awaitable,
    is_future,
    start_timer,
)

# Logging System
from .logger import (
    ROOT_LOGGER_NAME,
    ContextualLoggerAdapter,
    StructuredFormatter,
    TextFormatter,
    configure_logging,
    get_logger,
    set_log_level,
    with_context,
)

__all__ = [
    # Configuration Management
    "BaseTrackerSettings",
    "LoggingSettings",
    "TrackerSettings",
    "Settings",
    "get_settings",
    # Logging System
    "ROOT_LOGGER_NAME",
    "StructuredFormatter",
    "TextFormatter",
    "ContextualLoggerAdapter",
    "get_logger",
    "with_context",
    "configure_logging",
    "set_log_level",
    # Helpers
    "generate_uuid_hex",
    "generate_prefixed_id",
    "start_timer",
    "elapsed_ms",
    "is_awaitable",
    "is_future",
    "describe_callable",
]
