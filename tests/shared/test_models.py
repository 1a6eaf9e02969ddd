"""Tests for the shared value types."""

import pytest

from ccache_action.shared.errors import DomainError
from ccache_action.shared.models import CommandResult, PrimaryKey, StoredEntry, TimestampedEntryKey


class TestTimestampedEntryKey:
    """Test cases for TimestampedEntryKey."""

    def test_render(self):
        key = TimestampedEntryKey("setup-ccache-action_ci_build_ubuntu22", 1700000000000)

        assert key.value == "setup-ccache-action_ci_build_ubuntu22_1700000000000"

    def test_parse_splits_on_last_delimiter(self):
        key = TimestampedEntryKey.parse("setup-ccache-action_ci_build_ubuntu22_42")

        assert key.prefix == "setup-ccache-action_ci_build_ubuntu22"
        assert key.timestamp == 42

    @pytest.mark.parametrize("value", ["no-delimiter", "_42", "prefix_", "prefix_12a", "prefix_-1"])
    def test_parse_rejects_foreign_keys(self, value):
        with pytest.raises(DomainError):
            TimestampedEntryKey.parse(value)
        assert TimestampedEntryKey.try_parse(value) is None


class TestValueTypes:
    """Test cases for PrimaryKey, StoredEntry and CommandResult."""

    def test_primary_key_str(self):
        assert str(PrimaryKey("custom", is_default=False)) == "custom"

    def test_stored_entry_equality_ignores_id(self):
        assert StoredEntry("ns_1", entry_id=1) == StoredEntry("ns_1", entry_id=2)
        assert StoredEntry("ns_1").entry_key == TimestampedEntryKey("ns", 1)
        assert StoredEntry("manual").entry_key is None

    def test_command_result_ok(self):
        assert CommandResult(("ccache", "-p"), 0).ok is True
        assert CommandResult(("ccache", "-p"), 1, stderr="boom").ok is False
