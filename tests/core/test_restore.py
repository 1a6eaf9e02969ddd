"""Tests for the restore orchestrator."""

from __future__ import annotations

import logging

from ccache_action.core.restore import RestoreOrchestrator
from ccache_action.shared.errors import ErrorCode, TransientStoreError

PRIMARY = "setup-ccache-action_ci_build_ubuntu22"
FALLBACKS = [
    PRIMARY,
    "setup-ccache-action_ci_build",
    "setup-ccache-action_ci",
    "setup-ccache-action",
]


class TestRestoreOrchestrator:
    """Test cases for RestoreOrchestrator.restore."""

    def test_miss_on_empty_store(self, memory_store, handoff, state_channel) -> None:
        result = RestoreOrchestrator(memory_store, handoff).restore(["/cache"], PRIMARY, FALLBACKS)

        assert result.cache_hit is False
        assert result.matched_key is None
        assert state_channel.values == {}

    def test_fallback_prefix_match_is_a_hit(self, memory_store, handoff) -> None:
        """An older entry of the same job series restores via prefix."""
        memory_store.add(f"{PRIMARY}_1700000000000")

        result = RestoreOrchestrator(memory_store, handoff).restore(["/cache"], PRIMARY, FALLBACKS)

        assert result.cache_hit is True
        assert result.same_family is True
        assert result.matched_key == f"{PRIMARY}_1700000000000"
        assert handoff.found_key() == f"{PRIMARY}_1700000000000"

    def test_exact_match(self, memory_store, handoff) -> None:
        memory_store.add("my-key")

        result = RestoreOrchestrator(memory_store, handoff).restore(["/cache"], "my-key", ["my-key"])

        assert result.same_family is True

    def test_shorter_fallback_match_is_another_family(self, memory_store, handoff) -> None:
        memory_store.add("setup-ccache-action_ci_build_macos14_1700000000000")

        result = RestoreOrchestrator(memory_store, handoff).restore(["/cache"], PRIMARY, FALLBACKS)

        assert result.cache_hit is True
        assert result.same_family is False

    def test_keys_are_passed_to_store(self, memory_store, handoff) -> None:
        RestoreOrchestrator(memory_store, handoff).restore(["/cache"], PRIMARY, FALLBACKS)

        assert memory_store.fetch_calls == [(PRIMARY, FALLBACKS)]

    def test_store_failure_is_a_miss(self, memory_store, handoff, caplog) -> None:
        memory_store.fetch_error = TransientStoreError(ErrorCode.CACHE_FETCH_FAILED, "service down")

        with caplog.at_level(logging.WARNING):
            result = RestoreOrchestrator(memory_store, handoff).restore(["/cache"], PRIMARY, FALLBACKS)

        assert result.cache_hit is False
        assert "service down" in caplog.text
