"""Execution of external commands."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from ccache_action.shared.errors import (
    ApplicationError,
    ErrorCode,
    ErrorContext,
    ToolUnavailableError,
)
from ccache_action.shared.models import CommandResult

logger = logging.getLogger(__name__)


class CommandRunner:
    """Run a command as an argument list and capture its output.

    Commands are never passed through a shell. Unless ``silent`` is set,
    the command line and its output are written to the log the way a step
    log shows them.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def run(
        self,
        args: Sequence[str],
        *,
        check: bool = True,
        silent: bool = False,
    ) -> CommandResult:
        """Run ``args`` to completion.

        Raises:
            ToolUnavailableError: If the program does not exist
            ApplicationError: If ``check`` is set and the exit code is not 0,
                or the command timed out
        """
        args = [str(arg) for arg in args]
        if not silent:
            logger.info("[command]%s", subprocess.list2cmdline(args))

        try:
            completed = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise ToolUnavailableError(args[0]) from e
        except subprocess.TimeoutExpired as e:
            raise ApplicationError(
                ErrorCode.TOOL_COMMAND_FAILED,
                f"Command timed out after {self.timeout} seconds: {args[0]}",
                ErrorContext(operation="run_command", additional_data={"command": args[0]}),
                original_error=e,
            ) from e

        result = CommandResult(
            args=tuple(args),
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

        if not silent:
            for stream in (result.stdout, result.stderr):
                if stream.strip():
                    logger.info("%s", stream.rstrip())

        if check and not result.ok:
            raise ApplicationError(
                ErrorCode.TOOL_COMMAND_FAILED,
                f"The process '{args[0]}' failed with exit code {result.exit_code}",
                ErrorContext(
                    operation="run_command",
                    additional_data={"command": " ".join(args), "exit_code": result.exit_code},
                ),
            )

        return result


__all__ = ["CommandRunner"]
