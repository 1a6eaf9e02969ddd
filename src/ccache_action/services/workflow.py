"""Runner I/O through workflow commands and file commands.

Outputs, exported variables, PATH entries and state are appended to the
files the runner names in ``GITHUB_OUTPUT``, ``GITHUB_ENV``,
``GITHUB_PATH`` and ``GITHUB_STATE``. When a file is not provided (older
runners, local runs) the equivalent ``::command::`` line is printed.
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from pathlib import Path
from typing import IO

from ccache_action.shared.constants import RunnerEnv
from ccache_action.shared.errors import ApplicationError, ErrorCode, ErrorContext
from ccache_action.shared.workflow_commands import format_command

logger = logging.getLogger(__name__)


def format_file_command(name: str, value: str) -> str:
    """Render ``name<<delimiter`` / value / ``delimiter`` for a file command."""
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in name or delimiter in value:
        msg = "Unexpected input: value should not contain the delimiter"
        raise ValueError(msg)
    return f"{name}<<{delimiter}{os.linesep}{value}{os.linesep}{delimiter}{os.linesep}"


class WorkflowIO:
    """Write outputs, environment and state back to the runner."""

    def __init__(
        self,
        environ: MutableMapping[str, str] | None = None,
        stream: IO[str] | None = None,
    ) -> None:
        self.environ = os.environ if environ is None else environ
        self._stream = stream

    @property
    def stream(self) -> IO[str]:
        return self._stream or sys.stdout

    def _issue(self, command: str, message: str = "", **properties: str) -> None:
        self.stream.write(format_command(command, message, **properties) + os.linesep)
        self.stream.flush()

    def _append_file_command(self, variable: str, content: str) -> bool:
        file_path = self.environ.get(variable)
        if not file_path:
            return False
        path = Path(file_path)
        try:
            with path.open("a", encoding="utf-8") as file:
                file.write(content)
        except OSError as e:
            raise ApplicationError(
                ErrorCode.TOOL_COMMAND_FAILED,
                f"Cannot write to {variable} file: {path}",
                ErrorContext(operation="file_command", additional_data={"file": path}),
                original_error=e,
            ) from e
        return True

    def set_output(self, name: str, value: str) -> None:
        if not self._append_file_command(RunnerEnv.GITHUB_OUTPUT, format_file_command(name, value)):
            self._issue("set-output", value, name=name)
        logger.debug("Output %s=%s", name, value)

    def export_variable(self, name: str, value: str) -> None:
        """Make ``name`` available to this and every later step."""
        self.environ[name] = value
        if not self._append_file_command(RunnerEnv.GITHUB_ENV, format_file_command(name, value)):
            self._issue("set-env", value, name=name)

    def add_path(self, directory: str) -> None:
        """Prepend ``directory`` to PATH for this and every later step."""
        if not self._append_file_command(RunnerEnv.GITHUB_PATH, f"{directory}{os.linesep}"):
            self._issue("add-path", directory)
        current = self.environ.get("PATH", "")
        self.environ["PATH"] = f"{directory}{os.pathsep}{current}" if current else directory

    def save_state(self, name: str, value: str) -> None:
        """Publish job-scoped state read back by the post phase."""
        if not self._append_file_command(RunnerEnv.GITHUB_STATE, format_file_command(name, value)):
            self._issue("save-state", value, name=name)

    def get_state(self, name: str) -> str:
        return self.environ.get(f"{RunnerEnv.STATE_PREFIX}{name}", "")

    @contextmanager
    def group(self, title: str) -> Iterator[None]:
        """Fold everything logged inside the block under ``title``."""
        self._issue("group", title)
        try:
            yield
        finally:
            self._issue("endgroup")


__all__ = ["WorkflowIO", "format_file_command"]
