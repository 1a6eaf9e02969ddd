"""
Tests for the action's error handling system.

This module contains unit tests for the error hierarchy defined in
ccache_action.shared.errors.
"""

from enum import Enum
from pathlib import Path

import pytest

from ccache_action.shared.errors import (
    ApplicationError,
    CcacheActionError,
    ConfigurationError,
    DomainError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    ReservationConflictError,
    ScopePermissionError,
    ToolUnavailableError,
    TransientStoreError,
    create_cli_error,
    create_missing_context_error,
)


class Color(Enum):
    RED = "red"


class TestErrorContext:
    """Test cases for ErrorContext frozen dataclass."""

    def test_empty_context(self):
        context = ErrorContext()

        assert context.operation is None
        assert context.key is None
        assert context.safe_dict() == {"additional_data": {}}

    def test_additional_data_is_coerced(self):
        context = ErrorContext(
            operation="store",
            key="ns_1",
            additional_data={"path": Path("/tmp/cache"), "color": Color.RED, "attempt": 2},
        )

        assert context.safe_dict() == {
            "operation": "store",
            "key": "ns_1",
            "additional_data": {"path": str(Path("/tmp/cache")), "color": "red", "attempt": 2},
        }

    def test_rejects_non_primitive_values(self):
        with pytest.raises(TypeError, match="Cannot coerce"):
            ErrorContext(additional_data={"entries": [1, 2]})

    def test_is_frozen(self):
        context = ErrorContext(operation="store")

        with pytest.raises(AttributeError):
            context.operation = "fetch"


class TestErrorHierarchy:
    """Test cases for the error classes."""

    def test_string_and_dict(self):
        original = OSError("disk full")
        error = TransientStoreError(
            ErrorCode.CACHE_UPLOAD_FAILED,
            "Cannot upload",
            ErrorContext(operation="upload", key="ns_1"),
            original_error=original,
        )

        assert str(error) == "CACHE_UPLOAD_FAILED: Cannot upload"
        assert error.to_dict() == {
            "code": "CACHE_UPLOAD_FAILED",
            "message": "Cannot upload",
            "context": {"operation": "upload", "key": "ns_1", "additional_data": {}},
            "original_error": "disk full",
        }

    @pytest.mark.parametrize(
        ("error", "tier"),
        [
            (ReservationConflictError("ns_1"), InfrastructureError),
            (TransientStoreError(ErrorCode.CACHE_LIST_FAILED, "x"), InfrastructureError),
            (ScopePermissionError(ErrorCode.CACHE_DELETE_FORBIDDEN, "x"), InfrastructureError),
            (ConfigurationError("x"), ApplicationError),
            (ToolUnavailableError("ccache"), ApplicationError),
            (DomainError(ErrorCode.INVALID_ENTRY_KEY, "x"), CcacheActionError),
        ],
    )
    def test_tiers(self, error, tier):
        assert isinstance(error, tier)
        assert isinstance(error, CcacheActionError)

    def test_reservation_conflict(self):
        error = ReservationConflictError("ns_ci_1")

        assert error.code == ErrorCode.CACHE_RESERVATION_CONFLICT
        assert error.context.key == "ns_ci_1"
        assert "ns_ci_1" in error.message

    def test_missing_context_error(self):
        error = create_missing_context_error("ImageOS", "the default cache key")

        assert error.code is ErrorCode.MISSING_CONTEXT_VALUE
        assert error.config_key == "ImageOS"
        assert error.context.additional_data == {"config_key": "ImageOS"}
        assert "ImageOS" in error.message

    def test_cli_error(self):
        error = create_cli_error("boom", command="post", exit_code=2)

        assert error.exit_code == 2
        assert error.command == "post"
        assert error.context.additional_data == {"command": "post"}
