"""
Structured logging for setup-ccache-action.

Provides the logger setup used by the CLI (rich console locally, workflow
annotations on the CI runner, JSON lines with ``--json``) and helper
functions that record operations with structured context.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from ccache_action.shared.constants import RunnerEnv
from ccache_action.shared.errors import CcacheActionError, ErrorContext
from ccache_action.shared.workflow_commands import format_command

ROOT_LOGGER_NAME = "ccache_action"


class StructuredFormatter(logging.Formatter):
    """Formatter that renders each record as a JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the record as a JSON line.

        Args:
            record: Log record

        Returns:
            JSON encoded log entry
        """
        log_entry = {
            "timestamp": datetime.fromtimestamp(
                record.created,
                tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attribute in ("error_code", "context", "operation", "duration_ms", "result_info"):
            if hasattr(record, attribute):
                log_entry[attribute] = getattr(record, attribute)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)


class WorkflowCommandHandler(logging.StreamHandler):
    """Handler writing records the way the runner expects them on stdout.

    DEBUG records become ``::debug::`` commands (only shown when step
    debugging is enabled), WARNING and ERROR records become annotations,
    everything else is printed verbatim.
    """

    def __init__(self, stream: Any = None) -> None:
        super().__init__(stream or sys.stdout)
        self.setFormatter(logging.Formatter("%(message)s"))

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.ERROR:
            return format_command("error", message)
        if record.levelno >= logging.WARNING:
            return format_command("warning", message)
        if record.levelno <= logging.DEBUG:
            return format_command("debug", message)
        return message


def running_on_runner() -> bool:
    """Return True when executing inside a hosted CI job."""
    return os.environ.get(RunnerEnv.GITHUB_ACTIONS, "").lower() == "true"


def _create_rich_console() -> Console:
    """Create the rich console with the action's theme."""
    custom_theme = Theme(
        {
            "logging.level.debug": "cyan",
            "logging.level.info": "green",
            "logging.level.warning": "yellow",
            "logging.level.error": "red bold",
            "logging.level.critical": "red bold reverse",
            "log.time": "dim cyan",
            "log.message": "white",
            "log.path": "dim blue",
        }
    )
    return Console(theme=custom_theme, stderr=False)


def setup_structured_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str = "INFO",
    *,
    json_output: bool = False,
    use_rich_console: bool | None = None,
) -> logging.Logger:
    """Configure the action's logger.

    Args:
        name: Logger name (default: package root logger)
        level: Log level name
        json_output: Emit JSON lines instead of human-readable output
        use_rich_console: Force rich output on or off; by default rich is
            used everywhere except on the CI runner

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        logger.handlers.clear()

    log_level = getattr(logging, level.upper())
    logger.setLevel(log_level)

    if use_rich_console is None:
        use_rich_console = not running_on_runner()

    handler: logging.Handler
    if json_output:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
    elif use_rich_console:
        handler = RichHandler(
            console=_create_rich_console(),
            show_time=True,
            show_level=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            log_time_format="[%H:%M:%S]",
        )
    else:
        handler = WorkflowCommandHandler()

    handler.setLevel(log_level)
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def _context_to_dict(context: dict[str, Any] | ErrorContext | None) -> dict[str, Any]:
    if context is None:
        return {}
    if isinstance(context, ErrorContext):
        return context.safe_dict()
    return dict(context)


def log_operation_error(
    logger: logging.Logger,
    error: CcacheActionError,
    operation: str | None = None,
    context: dict[str, Any] | ErrorContext | None = None,
    *,
    level: int = logging.ERROR,
) -> None:
    """Record a CcacheActionError with its structured context.

    Args:
        logger: Logger instance
        error: The error to record
        operation: Operation name, defaults to the error's own operation
        context: Additional context merged into the error's context
        level: Log level; recoverable errors are recorded as warnings
    """
    context_dict = error.context.safe_dict()
    context_dict.update(_context_to_dict(context))

    logger.log(
        level,
        error.message,
        extra={
            "error_code": error.code.value,
            "context": context_dict,
            "operation": operation or error.context.operation,
        },
        exc_info=level >= logging.ERROR and error.original_error is not None,
    )


def log_operation_success(
    logger: logging.Logger,
    operation: str,
    duration_ms: float,
    result_info: dict[str, Any] | None = None,
) -> None:
    """Record a successfully completed operation."""
    logger.debug(
        "Operation '%s' completed successfully",
        operation,
        extra={
            "operation": operation,
            "duration_ms": duration_ms,
            "result_info": result_info or {},
        },
    )


def log_operation_start(
    logger: logging.Logger,
    operation: str,
    context: dict[str, Any] | None = None,
) -> None:
    """Record the start of an operation."""
    logger.debug(
        "Starting operation '%s'",
        operation,
        extra={
            "operation": operation,
            "context": context or {},
        },
    )


def log_api_call(
    logger: logging.Logger,
    endpoint: str,
    method: str = "GET",
    status_code: int | None = None,
    duration_ms: float | None = None,
) -> None:
    """Record a call to the remote cache service.

    Args:
        logger: Logger instance
        endpoint: Request URL without query string
        method: HTTP method
        status_code: HTTP status code, if a response was received
        duration_ms: Request duration in milliseconds
    """
    api_context: dict[str, Any] = {
        "endpoint": endpoint,
        "method": method,
    }
    if status_code:
        api_context["status_code"] = status_code
    if duration_ms:
        api_context["duration_ms"] = duration_ms

    logger.debug(
        "%s %s -> %s",
        method,
        endpoint,
        status_code if status_code is not None else "no response",
        extra={
            "operation": "api_call",
            "context": api_context,
        },
    )
