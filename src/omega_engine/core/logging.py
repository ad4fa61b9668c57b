"""Structured logging configuration for the omega turn engine.

Engine modules log through structlog with key/value context so that a
replayed session can be followed command by command. Logging is a pure
side channel: it never reads the RNG or mutates world state.

Example:
    >>> from omega_engine.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Command routed", token="Q", minutes=0)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TextIO

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from omega_engine.core.config import Settings


ENGINE_TAG = "omega_engine"


def add_engine_tag(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag every log entry with the engine name."""
    event_dict["app"] = ENGINE_TAG
    return event_dict


def drop_empty_fields(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Remove keys whose value is None.

    The router logs the pending interaction on every step, and most steps
    have none.
    """
    return {key: value for key, value in event_dict.items() if value is not None}


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Configure engine logging.

    Args:
        level: The logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, render entries as JSON lines.
        stream: Where entries are written; standard output when omitted.

    Example:
        >>> configure_logging(level="DEBUG", json_format=False)
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        drop_empty_fields,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_engine_tag,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=False,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def configure_from_settings(settings: Settings | None = None, *, stream: TextIO | None = None) -> None:
    """Configure logging from ``log_level`` and ``json_logs`` in the settings."""
    if settings is None:
        from omega_engine.core.config import get_settings

        settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs, stream=stream)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Optional name for the logger (typically __name__).

    Returns:
        A configured structlog BoundLogger instance.
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables included in all subsequent log entries.

    Example:
        >>> bind_context(session_id="slot-1", seed=42)
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = [
    "ENGINE_TAG",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
]
