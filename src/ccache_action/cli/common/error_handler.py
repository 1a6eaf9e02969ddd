"""
CLI Error Handling Utilities

Maps any exception raised by a phase to a CliError, logs it once and
returns the process exit code.
"""

from __future__ import annotations

import logging
from typing import Any

from ccache_action.cli.json_formatter import format_json_output, write_json_output
from ccache_action.shared.constants import CLIDefaults
from ccache_action.shared.errors import (
    ApplicationError,
    CcacheActionError,
    CliError,
    DomainError,
    ErrorCode,
    InfrastructureError,
    create_cli_error,
)

logger = logging.getLogger(__name__)


def handle_cli_error(
    error: BaseException,
    command: str,
    *,
    json_output: bool = False,
) -> int:
    """Report a fatal error and return the exit code.

    On the runner the message is rendered as a single ``::error::``
    annotation by the logging handler; the traceback is only logged at
    DEBUG level.

    Args:
        error: The exception that occurred
        command: The CLI command being executed
        json_output: Whether to also write a JSON error document

    Returns:
        Exit code for the CLI command
    """
    error_context: dict[str, Any] = {
        "command": command,
        "error_type": type(error).__name__,
    }
    cli_error = _map_error_to_cli_error(error, command, error_context)

    logger.debug("Traceback for %s failure", command, exc_info=error)
    logger.error(
        cli_error.message,
        extra={"error_code": cli_error.code.value, "context": error_context},
    )

    if json_output:
        write_json_output(
            format_json_output(
                success=False,
                command=command,
                errors=[cli_error.message],
                data={
                    "error_code": cli_error.code.value,
                    "exit_code": cli_error.exit_code,
                    "context": error_context,
                },
            )
        )

    return cli_error.exit_code


def handle_post_error(error: Exception, command: str) -> None:
    """Report an error in the post phase as a warning.

    The post phase runs after the build already succeeded or failed on its
    own merits, so cache bookkeeping never changes the job result.
    """
    message = error.message if isinstance(error, CcacheActionError) else str(error)
    logger.debug("Traceback for %s failure", command, exc_info=error)
    logger.warning(
        message,
        extra={"context": {"command": command, "error_type": type(error).__name__}},
    )


def _map_error_to_cli_error(
    error: BaseException,
    command: str,
    error_context: dict[str, Any],
) -> CliError:
    if isinstance(error, CliError):
        error_context["error_code"] = error.code.value
        return error

    # Action errors already carry a user-facing message
    if isinstance(error, (ApplicationError, InfrastructureError, DomainError)):
        error_context["error_code"] = error.code.value
        return create_cli_error(
            message=error.message,
            command=command,
            original_error=error,
        )

    if isinstance(error, KeyboardInterrupt):
        error_context["interrupt_type"] = "user_interrupt"
        cli_error = create_cli_error(
            message="Command interrupted by user",
            command=command,
            exit_code=CLIDefaults.EXIT_INTERRUPTED,
        )
        cli_error.code = ErrorCode.CLI_COMMAND_INTERRUPTED
        return cli_error

    if isinstance(error, OSError):
        error_context["error_category"] = "file_system"
        return create_cli_error(
            message=f"File system error: {error}",
            command=command,
            original_error=error,
        )

    error_context["error_category"] = "unexpected"
    return create_cli_error(
        message=f"Unexpected error: {error}",
        command=command,
        original_error=error if isinstance(error, Exception) else None,
    )


__all__ = ["handle_cli_error", "handle_post_error"]
