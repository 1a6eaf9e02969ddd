"""Stale cache entry removal.

After a successful persist, every older entry of the same key family is
superseded by the one just written. The reaper lists the family and
deletes entries whose timestamp is strictly lower than the new entry's.
Entries written concurrently by sibling jobs with a newer timestamp are
left alone, so a slow writer never removes a fresher cache.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ccache_action.core.handoff import HandoffSlot
from ccache_action.shared.errors import InfrastructureError, ScopePermissionError
from ccache_action.shared.logging import log_operation_error
from ccache_action.shared.models import StoredEntry, TimestampedEntryKey
from ccache_action.shared.protocols import CacheStoreProtocol

logger = logging.getLogger(__name__)


@dataclass
class ReapResult:
    """Outcome of a sweep.

    Attributes:
        stale_keys: Candidates selected for deletion, oldest first
        removed_keys: Keys the store reported as deleted
        failed_keys: Candidates whose deletion was rejected
        listing_failed: True when the sweep was aborted by a listing error
        restored_key_removed: True when the entry restored before the build
            was among the removed ones
    """

    stale_keys: list[str] = field(default_factory=list)
    removed_keys: list[str] = field(default_factory=list)
    failed_keys: list[str] = field(default_factory=list)
    listing_failed: bool = False
    restored_key_removed: bool = False


def select_stale_entries(
    entries: list[StoredEntry],
    stored_key: TimestampedEntryKey,
) -> list[StoredEntry]:
    """Return the entries superseded by ``stored_key``, keeping list order.

    An entry is stale when it belongs to the same key family (identical
    prefix) and its timestamp is strictly lower than the stored one. Keys
    that do not parse as timestamped entry keys are never selected.
    """
    stale = []
    for entry in entries:
        entry_key = entry.entry_key
        if entry_key is None or entry_key.prefix != stored_key.prefix:
            continue
        if entry_key.timestamp < stored_key.timestamp:
            stale.append(entry)
    return stale


class StaleEntryReaper:
    """Best-effort deletion of superseded cache entries."""

    def __init__(self, store: CacheStoreProtocol, handoff: HandoffSlot) -> None:
        self.store = store
        self.handoff = handoff

    def reap(self, stored_key: str | None = None) -> ReapResult:
        """Delete entries older than the entry written by the persist phase.

        Args:
            stored_key: The entry key just written; read from the handoff
                slot when omitted

        Returns:
            ReapResult; per-entry failures are recorded, not raised
        """
        stored_key = stored_key or self.handoff.stored_key()
        if not stored_key:
            logger.info("No cache was stored by this job, nothing to remove")
            return ReapResult()

        new_entry = TimestampedEntryKey.parse(stored_key)

        try:
            entries = self.store.list_entries(new_entry.prefix)
        except InfrastructureError as e:
            log_operation_error(
                logger,
                e,
                operation="list_cache_entries",
                context={"key_prefix": new_entry.prefix},
                level=logging.WARNING,
            )
            return ReapResult(listing_failed=True)

        stale = select_stale_entries(entries, new_entry)
        result = ReapResult(stale_keys=[entry.key for entry in stale])
        logger.info("Number of stale caches found: %d", len(stale))

        for entry in stale:
            try:
                removed = self.store.delete_entry(entry.key)
            except ScopePermissionError as e:
                result.failed_keys.append(entry.key)
                logger.info(
                    'Cannot remove stale cache outside of this scope. Key: "%s". Error: "%s"',
                    entry.key,
                    e.message,
                )
                continue
            except InfrastructureError as e:
                result.failed_keys.append(entry.key)
                log_operation_error(logger, e, operation="delete_cache_entry", level=logging.WARNING)
                continue
            result.removed_keys.extend(removed_entry.key for removed_entry in removed)

        if result.removed_keys:
            logger.info("Removed stale caches:\n%s", "\n".join(result.removed_keys))

        found_key = self.handoff.found_key()
        result.restored_key_removed = bool(found_key) and found_key in result.removed_keys
        if result.restored_key_removed:
            logger.info('Restored cache "%s" is superseded by "%s"', found_key, stored_key)

        return result


__all__ = ["ReapResult", "StaleEntryReaper", "select_stale_entries"]
