"""Persist orchestration.

Runs after the build. Cache entries are immutable: the store rejects a key
that already exists instead of overwriting it. Every write goes to a fresh
``{primary_key}_{epoch_millis}`` key, and a reservation conflict, e.g. a
sibling matrix job racing for the same millisecond, is retried under a new
timestamp up to a fixed number of attempts.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_none,
)

from ccache_action.core.handoff import HandoffSlot
from ccache_action.shared.constants import PersistConfig
from ccache_action.shared.errors import ReservationConflictError
from ccache_action.shared.logging import log_operation_success
from ccache_action.shared.models import TimestampedEntryKey
from ccache_action.shared.protocols import CacheStoreProtocol, PathLike

logger = logging.getLogger(__name__)


def epoch_millis() -> int:
    """Current wall-clock time in milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class PersistResult:
    """Outcome of a persist attempt.

    Attributes:
        stored_key: The entry key that was written, None on failure
        attempts: Number of store attempts made
    """

    stored_key: str | None
    attempts: int

    @property
    def success(self) -> bool:
        return self.stored_key is not None


class PersistOrchestrator:
    """Write a new timestamped cache entry, retrying reservation conflicts."""

    def __init__(
        self,
        store: CacheStoreProtocol,
        handoff: HandoffSlot,
        *,
        max_attempts: int = PersistConfig.MAX_UPLOAD_RETRIES,
        clock: Callable[[], int] = epoch_millis,
    ) -> None:
        self.store = store
        self.handoff = handoff
        self.max_attempts = max_attempts
        self._clock = clock
        self._last_timestamp = 0

    def next_entry_key(self, primary_key: str) -> TimestampedEntryKey:
        """Build the entry key for the next attempt.

        Timestamps strictly increase within this process even if the clock
        does not advance between attempts.
        """
        timestamp = max(self._clock(), self._last_timestamp + 1)
        self._last_timestamp = timestamp
        return TimestampedEntryKey(prefix=primary_key, timestamp=timestamp)

    def persist(self, paths: Sequence[PathLike], primary_key: str) -> PersistResult:
        """Store ``paths`` under a new entry key.

        Args:
            paths: Local directories to archive
            primary_key: The job's cache key

        Returns:
            PersistResult; ``success`` is False when every attempt hit a
            reservation conflict

        Raises:
            CcacheActionError: Any failure other than a reservation conflict
                aborts the persist step immediately
        """
        start = time.monotonic()
        attempts = 0
        entry_key: TimestampedEntryKey | None = None

        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            retry=retry_if_exception_type(ReservationConflictError),
            wait=wait_none(),
            before_sleep=self._log_conflict,
            reraise=True,
        )

        try:
            for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    entry_key = self.next_entry_key(primary_key)
                    logger.info(
                        'Using `key`: "%s", `paths`: "%s"',
                        entry_key,
                        ",".join(str(path) for path in paths),
                    )
                    self.store.store(paths, entry_key.value)
        except ReservationConflictError as e:
            logger.warning(
                "Unable to store cache after %d attempts: %s",
                attempts,
                e.message,
            )
            return PersistResult(stored_key=None, attempts=attempts)

        stored_key = str(entry_key)
        self.handoff.publish_stored_key(stored_key)
        logger.info('Cache stored with key: "%s"', stored_key)
        log_operation_success(
            logger,
            operation="persist_cache",
            duration_ms=(time.monotonic() - start) * 1000,
            result_info={"stored_key": stored_key, "attempts": attempts},
        )
        return PersistResult(stored_key=stored_key, attempts=attempts)

    def _log_conflict(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.info(
            'Upload error: "%s". Retry %d...',
            error,
            retry_state.attempt_number,
        )


__all__ = ["PersistOrchestrator", "PersistResult", "epoch_millis"]
