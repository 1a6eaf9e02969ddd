"""Tests for the stale entry reaper."""

from __future__ import annotations

import logging

from ccache_action.core.reaper import StaleEntryReaper, select_stale_entries
from ccache_action.shared.errors import ErrorCode, ScopePermissionError, TransientStoreError
from ccache_action.shared.models import StoredEntry, TimestampedEntryKey

PREFIX = "setup-ccache-action_ci_build_ubuntu22"


class TestSelectStaleEntries:
    """Test cases for select_stale_entries."""

    def test_only_older_entries_of_same_family(self) -> None:
        entries = [
            StoredEntry(f"{PREFIX}_100"),
            StoredEntry(f"{PREFIX}_300"),
            StoredEntry(f"{PREFIX}_400"),
            StoredEntry(f"{PREFIX}_alice-feature_50"),
            StoredEntry(f"{PREFIX}"),
        ]

        stale = select_stale_entries(entries, TimestampedEntryKey(PREFIX, 300))

        assert [entry.key for entry in stale] == [f"{PREFIX}_100"]


class TestStaleEntryReaper:
    """Test cases for StaleEntryReaper.reap."""

    def test_deletes_older_entries(self, memory_store, handoff) -> None:
        for timestamp in (100, 200, 300):
            memory_store.add(f"{PREFIX}_{timestamp}")

        result = StaleEntryReaper(memory_store, handoff).reap(f"{PREFIX}_300")

        assert result.removed_keys == [f"{PREFIX}_100", f"{PREFIX}_200"]
        assert list(memory_store.entries) == [f"{PREFIX}_300"]

    def test_never_deletes_newer_entries(self, memory_store, handoff) -> None:
        """A concurrent sibling's newer entry survives."""
        for timestamp in (100, 300, 500):
            memory_store.add(f"{PREFIX}_{timestamp}")

        StaleEntryReaper(memory_store, handoff).reap(f"{PREFIX}_300")

        assert set(memory_store.entries) == {f"{PREFIX}_300", f"{PREFIX}_500"}

    def test_reads_stored_key_from_handoff(self, memory_store, handoff) -> None:
        memory_store.add(f"{PREFIX}_100")
        memory_store.add(f"{PREFIX}_200")
        handoff.publish_stored_key(f"{PREFIX}_200")

        result = StaleEntryReaper(memory_store, handoff).reap()

        assert result.removed_keys == [f"{PREFIX}_100"]

    def test_reports_removal_of_restored_entry(self, memory_store, handoff) -> None:
        memory_store.add(f"{PREFIX}_100")
        memory_store.add(f"{PREFIX}_200")
        handoff.publish_found_key(f"{PREFIX}_100")

        result = StaleEntryReaper(memory_store, handoff).reap(f"{PREFIX}_200")

        assert result.restored_key_removed is True

    def test_restored_entry_of_other_family_is_kept(self, memory_store, handoff) -> None:
        memory_store.add("setup-ccache-action_ci_build_macos14_100")
        memory_store.add(f"{PREFIX}_200")
        handoff.publish_found_key("setup-ccache-action_ci_build_macos14_100")

        result = StaleEntryReaper(memory_store, handoff).reap(f"{PREFIX}_200")

        assert result.restored_key_removed is False
        assert "setup-ccache-action_ci_build_macos14_100" in memory_store.entries

    def test_nothing_stored_is_a_no_op(self, memory_store, handoff) -> None:
        memory_store.add(f"{PREFIX}_100")

        result = StaleEntryReaper(memory_store, handoff).reap()

        assert result.stale_keys == []
        assert f"{PREFIX}_100" in memory_store.entries

    def test_delete_failure_does_not_stop_sweep(self, memory_store, handoff, caplog) -> None:
        for timestamp in (100, 200, 300, 400):
            memory_store.add(f"{PREFIX}_{timestamp}")
        memory_store.delete_errors[f"{PREFIX}_100"] = ScopePermissionError(
            ErrorCode.CACHE_DELETE_FORBIDDEN,
            "Resource not accessible by integration",
        )
        memory_store.delete_errors[f"{PREFIX}_200"] = TransientStoreError(
            ErrorCode.CACHE_STORE_UNAVAILABLE,
            "timeout",
        )

        with caplog.at_level(logging.INFO):
            result = StaleEntryReaper(memory_store, handoff).reap(f"{PREFIX}_400")

        assert result.failed_keys == [f"{PREFIX}_100", f"{PREFIX}_200"]
        assert result.removed_keys == [f"{PREFIX}_300"]
        assert "Resource not accessible" in caplog.text

    def test_listing_failure_aborts(self, memory_store, handoff) -> None:
        memory_store.add(f"{PREFIX}_100")
        memory_store.list_error = TransientStoreError(ErrorCode.CACHE_LIST_FAILED, "HTTP 500")

        result = StaleEntryReaper(memory_store, handoff).reap(f"{PREFIX}_200")

        assert result.listing_failed is True
        assert memory_store.deleted_keys == []

    def test_logs_stale_count(self, memory_store, handoff, caplog) -> None:
        memory_store.add(f"{PREFIX}_100")

        with caplog.at_level(logging.INFO):
            StaleEntryReaper(memory_store, handoff).reap(f"{PREFIX}_200")

        assert "Number of stale caches found: 1" in caplog.text
        assert f"Removed stale caches:\n{PREFIX}_100" in caplog.text
