"""Structured logging infrastructure for FlowDay.

Provides structured logging using structlog with FlowDay-specific context
such as the analysis run id and component names. Supports human-readable
console output and JSON lines, optionally written to a file.

Example usage:
    from flowday.core.logging import get_logger, configure_logging, with_context

    # Configure once at startup
    configure_logging(level="DEBUG", format="console")

    # Get a component-specific logger
    logger = get_logger("learning.engine")

    # Log with key/value context
    logger.info("analysis_completed", insights=7, patterns=12)

    # Correlate every log line of one analysis run
    ctx = AnalysisContext(trigger="task_completed")
    with with_context(ctx):
        logger.info("segmentation_done")  # Includes run_id, trigger
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


@dataclass
class AnalysisContext:
    """Correlation fields attached to every log entry of one analysis run.

    Attributes:
        run_id: Unique id of the run, generated when not given.
        trigger: What started the run (e.g. "cli", "task_completed").
    """

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    trigger: str = "manual"

    def to_dict(self) -> dict[str, Any]:
        return {"run_id": self.run_id, "trigger": self.trigger}


_current_context: ContextVar[AnalysisContext | None] = ContextVar(
    "flowday_context", default=None
)


def get_current_context() -> AnalysisContext | None:
    """Get the current AnalysisContext if set."""
    return _current_context.get()


@contextmanager
def with_context(ctx: AnalysisContext) -> Iterator[AnalysisContext]:
    """Context manager that sets AnalysisContext for the duration of a block.

    Args:
        ctx: The AnalysisContext to use for the block.

    Yields:
        The AnalysisContext that was set.
    """
    token = _current_context.set(ctx)
    try:
        yield ctx
    finally:
        _current_context.reset(token)


def _add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds ISO8601 UTC timestamp."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def _add_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds AnalysisContext fields to log entries.

    Explicitly bound keys take precedence over context fields.
    """
    ctx = get_current_context()
    if ctx is not None:
        for key, value in ctx.to_dict().items():
            event_dict.setdefault(key, value)
    return event_dict


class FlowdayLogger:
    """Component logger wrapper around structlog.

    The underlying structlog logger is fetched on every call so that loggers
    created at import time still respect a later configure_logging().
    """

    def __init__(self, component: str, **initial_context: Any) -> None:
        self._component = component
        self._context: dict[str, Any] = {"component": component, **initial_context}

    def _get_logger(self) -> structlog.stdlib.BoundLogger:
        logger: structlog.stdlib.BoundLogger = structlog.get_logger().bind(**self._context)
        return logger

    def bind(self, **context: Any) -> FlowdayLogger:
        """Create a new logger with additional bound context."""
        new_logger = FlowdayLogger.__new__(FlowdayLogger)
        new_logger._component = self._component
        new_logger._context = {**self._context, **context}
        return new_logger

    def debug(self, event: str, **kw: Any) -> None:
        self._get_logger().debug(event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._get_logger().info(event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._get_logger().warning(event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._get_logger().error(event, **kw)


def _get_processors(
    format: Literal["json", "console"],  # noqa: A002
    include_timestamps: bool,
) -> list[Processor]:
    """Build the structlog processor chain for the given output format."""
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        _add_context,
    ]

    if include_timestamps:
        processors.append(_add_timestamp)

    processors.extend([
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ])

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    return processors


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING",
    format: Literal["json", "console"] = "console",  # noqa: A002
    file_path: Path | None = None,
    include_timestamps: bool = True,
) -> None:
    """Configure FlowDay structured logging.

    Call once at application startup before any logging occurs.

    Args:
        level: Minimum log level to capture.
        format: "console" for human-readable output, "json" for JSON lines.
        file_path: Optional log file. When given, output goes to the file
            instead of stderr.
        include_timestamps: Whether to include ISO8601 timestamps.
    """
    log_level = getattr(logging, level)

    handler: logging.Handler
    if file_path is not None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(file_path, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    # cache_logger_on_first_use=False keeps import-time loggers in sync with
    # a later reconfiguration
    structlog.configure(
        processors=_get_processors(format, include_timestamps),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(component: str, **initial_context: Any) -> FlowdayLogger:
    """Get a FlowDay logger for a component.

    Args:
        component: The component name (e.g., "learning.engine", "store.json").
        **initial_context: Additional context to bind.

    Returns:
        A FlowdayLogger instance bound to the component.
    """
    return FlowdayLogger(component, **initial_context)


__all__ = [
    "AnalysisContext",
    "FlowdayLogger",
    "configure_logging",
    "get_current_context",
    "get_logger",
    "with_context",
]
