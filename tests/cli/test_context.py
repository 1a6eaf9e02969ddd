"""
Test CLI context management system.

This test ensures that the context management system works correctly
with ContextVar and provides proper type safety.
"""

import pytest
from pydantic import ValidationError

from ccache_action.cli.common.context import (
    CliContext,
    LogLevel,
    clear_cli_context,
    get_cli_context,
    set_cli_context,
)


def test_cli_context_creation() -> None:
    """Test that CliContext can be created with default values."""
    context = CliContext()

    assert context.verbose == 0
    assert context.log_level == LogLevel.INFO
    assert context.json_output is False


def test_cli_context_validation() -> None:
    with pytest.raises(ValidationError):
        CliContext(verbose=-1)

    with pytest.raises(ValidationError):
        CliContext(log_level="INVALID")


def test_cli_context_get_effective_log_level() -> None:
    assert CliContext(log_level=LogLevel.WARNING).get_effective_log_level() == "WARNING"
    assert CliContext(verbose=1, log_level=LogLevel.WARNING).get_effective_log_level() == "DEBUG"


def test_context_var_round_trip() -> None:
    """Test set, get and clear of the global context."""
    clear_cli_context()
    assert get_cli_context() == CliContext()

    set_cli_context(CliContext(json_output=True))
    assert get_cli_context().json_output is True

    clear_cli_context()
    assert get_cli_context().json_output is False
