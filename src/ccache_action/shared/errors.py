"""setup-ccache-action Error Handling Module

This module defines the error handling system for the action, providing
structured error classes with context information and user-friendly messages.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Recoverable vs fatal: InfrastructureError subclasses are absorbed at the
  phase that raised them, ApplicationError subclasses abort the run
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]


class ErrorCode(str, Enum):
    """Error codes for the action.

    This enum serves as the single source of truth for all error codes
    used throughout the application.
    """

    # Remote cache store errors
    CACHE_RESERVATION_CONFLICT = "CACHE_RESERVATION_CONFLICT"
    CACHE_STORE_UNAVAILABLE = "CACHE_STORE_UNAVAILABLE"
    CACHE_LIST_FAILED = "CACHE_LIST_FAILED"
    CACHE_FETCH_FAILED = "CACHE_FETCH_FAILED"
    CACHE_UPLOAD_FAILED = "CACHE_UPLOAD_FAILED"
    CACHE_DELETE_FORBIDDEN = "CACHE_DELETE_FORBIDDEN"
    CACHE_ARCHIVE_FAILED = "CACHE_ARCHIVE_FAILED"
    INVALID_ENTRY_KEY = "INVALID_ENTRY_KEY"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    MISSING_CONTEXT_VALUE = "MISSING_CONTEXT_VALUE"
    INVALID_INPUT = "INVALID_INPUT"

    # Tool errors
    TOOL_UNAVAILABLE = "TOOL_UNAVAILABLE"
    TOOL_COMMAND_FAILED = "TOOL_COMMAND_FAILED"

    # CLI errors
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"
    CLI_COMMAND_INTERRUPTED = "CLI_COMMAND_INTERRUPTED"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path and Enum values to primitive types.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types are allowed in additional_data so that the context
    can be serialized into log records safely.

    Attributes:
        operation: Optional operation name that caused the error
        key: Optional cache key involved in the failure
        additional_data: Optional dict with primitive values only
    """

    operation: str | None = None
    key: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        """Post-initialization validation and coercion."""
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self) -> dict[str, Any]:
        """Export context as dict, additional_data is never None."""
        data: dict[str, Any] = {}
        if self.operation is not None:
            data["operation"] = self.operation
        if self.key is not None:
            data["key"] = self.key
        data["additional_data"] = self.additional_data or {}
        return data


class CcacheActionError(Exception):
    """Base exception class for all action errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize CcacheActionError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error
        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(CcacheActionError):
    """Domain-specific errors.

    Raised when key composition rules are violated, e.g. a timestamped
    entry key that does not carry a numeric suffix.
    """


class InfrastructureError(CcacheActionError):
    """Infrastructure-related errors.

    These errors occur when interacting with external systems such as the
    remote cache store or the local file system. They are recoverable and
    are absorbed by the phase that raised them.
    """


class ApplicationError(CcacheActionError):
    """Application-level errors.

    These errors abort the run with a single user-visible failure message.
    """


class ReservationConflictError(InfrastructureError):
    """The store rejected a write because the key already exists.

    Entries are immutable, so the writer retries under a fresh timestamp.
    """

    def __init__(
        self,
        key: str,
        message: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.CACHE_RESERVATION_CONFLICT,
            message or f"Cache entry already exists or is being written: {key}",
            ErrorContext(operation="store", key=key),
            original_error,
        )


class TransientStoreError(InfrastructureError):
    """Network, quota or listing failure talking to the remote store."""


class ScopePermissionError(InfrastructureError):
    """A delete was rejected because the entry belongs to another scope.

    Pull-request runs may not delete entries created on other refs.
    """


class ConfigurationError(ApplicationError):
    """A required context value or input is absent or invalid."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        original_error: Exception | None = None,
        code: ErrorCode = ErrorCode.CONFIGURATION_ERROR,
    ) -> None:
        additional_data: dict[str, PrimitiveContextValue] | None = (
            {"config_key": config_key} if config_key else None
        )
        super().__init__(
            code,
            message,
            ErrorContext(operation="load_configuration", additional_data=additional_data),
            original_error,
        )
        self.config_key = config_key


class ToolUnavailableError(ApplicationError):
    """The underlying cache tool could not be found or executed."""

    def __init__(self, tool: str, message: str | None = None) -> None:
        super().__init__(
            ErrorCode.TOOL_UNAVAILABLE,
            message or f"Cannot find {tool} on PATH",
            ErrorContext(operation="locate_tool", additional_data={"tool": tool}),
        )
        self.tool = tool


class CliError(ApplicationError):
    """CLI-specific error with the exit code the process should return."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        command: str | None = None,
        exit_code: int = 1,
    ):
        super().__init__(code, message, context, original_error)
        self.command = command
        self.exit_code = exit_code


def create_missing_context_error(variable: str, purpose: str) -> ConfigurationError:
    """Create the error raised when a required job variable is unset."""
    return ConfigurationError(
        f"Required environment variable '{variable}' is not set; it is needed for {purpose}",
        config_key=variable,
        code=ErrorCode.MISSING_CONTEXT_VALUE,
    )


def create_cli_error(
    message: str,
    command: str | None = None,
    original_error: Exception | None = None,
    exit_code: int = 1,
) -> CliError:
    """Create a CLI error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"command": command} if command else None
    )
    context = ErrorContext(
        operation="cli",
        additional_data=additional_data,
    )
    return CliError(
        ErrorCode.CLI_UNEXPECTED_ERROR,
        message,
        context,
        original_error,
        command,
        exit_code,
    )
