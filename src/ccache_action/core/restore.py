"""Restore orchestration.

Runs before the build: asks the cache store for the best entry matching
the primary key or one of the fallback keys and publishes the matched
key for the post-build phase.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass

from ccache_action.core.handoff import HandoffSlot
from ccache_action.shared.errors import InfrastructureError
from ccache_action.shared.logging import log_operation_error, log_operation_success
from ccache_action.shared.models import TimestampedEntryKey
from ccache_action.shared.protocols import CacheStoreProtocol, PathLike

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestoreResult:
    """Outcome of a restore attempt.

    Attributes:
        matched_key: Key of the restored entry, None on a miss
        same_family: True when the entry is the primary key itself or one of
            its timestamped entries, False for a shorter fallback match
    """

    matched_key: str | None = None
    same_family: bool = False

    @property
    def cache_hit(self) -> bool:
        return self.matched_key is not None


class RestoreOrchestrator:
    """Restore the cache directory from the best matching entry."""

    def __init__(self, store: CacheStoreProtocol, handoff: HandoffSlot) -> None:
        self.store = store
        self.handoff = handoff

    def restore(
        self,
        paths: Sequence[PathLike],
        primary_key: str,
        fallback_keys: Sequence[str],
    ) -> RestoreResult:
        """Fetch the best match and record it.

        Store failures are logged as warnings and reported as a miss; a
        failed restore never fails the job.

        Args:
            paths: Local directories to restore
            primary_key: The job's cache key
            fallback_keys: Restore keys, most specific first

        Returns:
            RestoreResult describing the hit, if any
        """
        logger.info(
            'Retrieving cache with `primaryKey`: "%s", `restoreKeys`: "%s", `paths`: "%s"',
            primary_key,
            ",".join(fallback_keys),
            ",".join(str(path) for path in paths),
        )

        start = time.monotonic()
        try:
            matched_key = self.store.fetch(paths, primary_key, fallback_keys)
        except InfrastructureError as e:
            log_operation_error(logger, e, operation="restore_cache", level=logging.WARNING)
            return RestoreResult()

        if matched_key is None:
            logger.info("Cache not found...")
            return RestoreResult()

        self.handoff.publish_found_key(matched_key)
        entry_key = TimestampedEntryKey.try_parse(matched_key)
        same_family = matched_key == primary_key or (
            entry_key is not None and entry_key.prefix == primary_key
        )
        result = RestoreResult(matched_key=matched_key, same_family=same_family)
        logger.info('Cache found with key: "%s"', matched_key)
        log_operation_success(
            logger,
            operation="restore_cache",
            duration_ms=(time.monotonic() - start) * 1000,
            result_info={"matched_key": matched_key, "same_family": result.same_family},
        )
        return result


__all__ = ["RestoreOrchestrator", "RestoreResult"]
