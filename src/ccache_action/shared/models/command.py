"""Result of an external command invocation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of a finished process.

    Attributes:
        args: The argument list that was executed
        exit_code: Process return code
        stdout: Captured standard output
        stderr: Captured standard error
    """

    args: tuple[str, ...]
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


__all__ = ["CommandResult"]
