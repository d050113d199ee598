"""Structured logging for trace-opener.

Logs go to stderr so stdout carries only command output (``locate --json``
in particular). Nothing is printed below WARNING unless ``--verbose`` or
TRACE_OPENER_LOG_LEVEL asks for it.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, TextIO

import structlog

if TYPE_CHECKING:
    from structlog.typing import EventDict, WrappedLogger

# Set for the duration of one resolve so its log lines can be grouped
invocation_id_ctx: ContextVar[str] = ContextVar("invocation_id", default="")


def add_invocation_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add invocation_id to log event if set in context."""
    invocation_id = invocation_id_ctx.get()
    if invocation_id:
        event_dict["invocation_id"] = invocation_id
    return event_dict


def configure_logging(
    log_level: str = "WARNING",
    json_format: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route structlog output to ``stream`` at ``log_level``.

    Args:
        log_level: Level name; unknown names fall back to WARNING.
        json_format: One JSON object per line instead of key=value text.
        stream: Defaults to sys.stderr.
    """
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        add_invocation_id,
    ]
    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.WARNING)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Return a module logger tagged with ``logger_name``.

    The proxy resolves the configuration on every call, so module-level
    loggers follow a later configure_logging().
    """
    return structlog.get_logger(logger_name=name)
