"""Cross-phase handoff of cache keys.

The pre-build (``main``) and post-build (``post``) phases run as separate
processes of the same job. Keys found at restore time and written at
persist time are published as named job-scoped state and read back by
the later phase. Values published in this process are also kept in memory
so persist and reap can hand off within one process.
"""

from __future__ import annotations

import logging

from ccache_action.shared.constants import StateNames
from ccache_action.shared.protocols import StateChannelProtocol

logger = logging.getLogger(__name__)


class HandoffSlot:
    """Named slot carrying one key from an earlier phase to a later one."""

    def __init__(self, channel: StateChannelProtocol) -> None:
        self._channel = channel
        self._published: dict[str, str] = {}

    def publish(self, name: str, value: str) -> None:
        self._published[name] = value
        self._channel.save_state(name, value)
        logger.debug("Published %s=%s", name, value)

    def read(self, name: str) -> str | None:
        """Return the value published under ``name``, or None."""
        if name in self._published:
            return self._published[name]
        value = self._channel.get_state(name)
        return value or None

    def publish_found_key(self, key: str) -> None:
        self.publish(StateNames.FOUND_CACHE_KEY, key)

    def found_key(self) -> str | None:
        return self.read(StateNames.FOUND_CACHE_KEY)

    def publish_stored_key(self, key: str) -> None:
        self.publish(StateNames.STORED_CACHE_KEY, key)

    def stored_key(self) -> str | None:
        return self.read(StateNames.STORED_CACHE_KEY)


__all__ = ["HandoffSlot"]
