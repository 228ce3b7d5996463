"""
Logging System for tracker-core

The library logs through the standard `logging` module under the
`tracker_core` namespace and stays silent unless the application configures
handlers, either on its own or through `configure_logging`.
"""

import json
import logging
import os
import sys
from collections.abc import MutableMapping
from datetime import datetime
from typing import Any, Optional, Dict, Union

from .config import LoggingSettings, get_settings

ROOT_LOGGER_NAME = "tracker_core"

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]


class StructuredFormatter(logging.Formatter):
    """JSON log formatter"""

    def __init__(self, include_trace: bool = False):
        super().__init__()
        self.include_trace = include_trace

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "process": {
                "pid": os.getpid(),
                "thread_id": record.thread,
                "thread_name": record.threadName,
            },
            "location": {
                "file": record.filename,
                "function": record.funcName,
                "line": record.lineno,
                "module": record.module,
            },
        }

        if getattr(record, "extra_fields", None):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": (
                    self.formatException(record.exc_info)
                    if self.include_trace
                    else None
                ),
            }

        if self.include_trace and record.stack_info:
            log_data["stack_info"] = record.stack_info

        return json.dumps(log_data, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human readable formatter"""

    def __init__(self) -> None:
        format_string = (
            "%(asctime)s | %(levelname)-8s | %(name)-28s | %(context)s%(message)s"
        )
        super().__init__(format_string, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        extra_fields = getattr(record, "extra_fields", None) or {}
        record.context = (
            "".join(f"[{key}={value}] " for key, value in extra_fields.items())
            if extra_fields
            else ""
        )
        return super().format(record)


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that attaches its context to every record"""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        if "extra" not in kwargs:
            kwargs["extra"] = {}

        kwargs["extra"].update(self.extra)

        # Group user fields under extra_fields so formatters can find them
        extra_fields = {
            key: value
            for key, value in kwargs["extra"].items()
            if key != "extra_fields"
        }
        kwargs["extra"]["extra_fields"] = extra_fields

        return msg, kwargs

    def add_context(self, **kwargs: Any) -> "ContextualLoggerAdapter":
        """New adapter with additional context"""
        new_extra = dict(self.extra) if self.extra else {}
        new_extra.update(kwargs)
        return ContextualLoggerAdapter(self.logger, new_extra)


def get_logger(
    name: str = ROOT_LOGGER_NAME, context: Optional[Dict[str, Any]] = None
) -> ContextualLoggerAdapter:
    """Contextual logger for a tracker_core component"""
    return ContextualLoggerAdapter(logging.getLogger(name), context)


def with_context(
    logger: Optional[LoggerLike], name: str, **context: Any
) -> ContextualLoggerAdapter:
    """
    Adapt a caller-supplied logger (or the named package logger when none is
    given) and attach the given context to it.
    """
    if logger is None:
        return get_logger(name, context)

    if isinstance(logger, ContextualLoggerAdapter):
        return logger.add_context(**context)

    if isinstance(logger, logging.LoggerAdapter):
        merged = dict(logger.extra or {})
        merged.update(context)
        return ContextualLoggerAdapter(logger.logger, merged)

    return ContextualLoggerAdapter(logger, context)


def configure_logging(
    level: Optional[str] = None,
    format_type: Optional[str] = None,
    settings: Optional[LoggingSettings] = None,
) -> logging.Logger:
    """
    Install a stdout handler on the tracker_core logger tree.

    Explicit arguments win over the settings, which default to the cached
    environment settings.
    """
    settings = settings or get_settings().logging
    level = (level or settings.level).upper()
    format_type = format_type or settings.format

    logger = logging.getLogger(settings.logger_name)
    logger.setLevel(getattr(logging, level))

    for handler in logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    formatter: logging.Formatter
    if format_type == "json":
        formatter = StructuredFormatter(include_trace=settings.include_trace)
    else:
        formatter = TextFormatter()
    handler.setFormatter(formatter)
    handler.setLevel(getattr(logging, level))
    logger.addHandler(handler)

    # Avoid duplicates through the root logger
    logger.propagate = False

    return logger


def set_log_level(level: Union[str, int], name: str = ROOT_LOGGER_NAME) -> None:
    """Change the level of a tracker_core logger and its handlers"""
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
