"""Service protocols for dependency inversion.

Core orchestrators depend on these interfaces only; the concrete cache
stores and the runner I/O live in the services layer.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, Union, runtime_checkable

from ccache_action.shared.models import CommandResult, StoredEntry

PathLike = Union[str, Path]


@runtime_checkable
class CacheStoreProtocol(Protocol):
    """Remote artifact cache keeping immutable archives under string keys.

    Writing an existing key is rejected with ReservationConflictError
    instead of overwriting it.

    Example:
        >>> from ccache_action.services.cache_store import LocalCacheStore
        >>>
        >>> store: CacheStoreProtocol = LocalCacheStore("/tmp/ccache-store")
        >>> store.fetch(["/home/runner/.ccache"], "ns_ci", ["ns_ci", "ns"])
    """

    def fetch(
        self,
        paths: Sequence[PathLike],
        primary_key: str,
        fallback_keys: Sequence[str],
    ) -> str | None:
        """Restore ``paths`` from the best matching entry.

        The primary key is tried as an exact key, then each fallback key
        as an exact key and as a prefix (newest matching entry wins).

        Returns:
            The key of the restored entry, or None when nothing matched

        Raises:
            TransientStoreError: On network or service failures
        """

    def store(self, paths: Sequence[PathLike], key: str) -> None:
        """Archive ``paths`` under ``key``.

        Raises:
            ReservationConflictError: If ``key`` exists or is being written
            TransientStoreError: On any other failure
        """

    def list_entries(self, key_prefix: str) -> list[StoredEntry]:
        """Return entries whose key starts with ``key_prefix``, oldest first.

        Raises:
            TransientStoreError: If the listing fails
        """

    def delete_entry(self, key: str) -> list[StoredEntry]:
        """Delete ``key`` and return the entries actually removed.

        The remote may treat ``key`` as a prefix and remove several entries.

        Raises:
            ScopePermissionError: If the entry belongs to another scope
            TransientStoreError: On any other failure
        """


class StateChannelProtocol(Protocol):
    """Job-run scoped key-value storage provided by the runner."""

    def save_state(self, name: str, value: str) -> None:
        """Publish ``value`` for later phases of the same job."""

    def get_state(self, name: str) -> str:
        """Return the value published by an earlier phase, or ``""``."""


class CommandRunnerProtocol(Protocol):
    """Runs platform commands and captures their output."""

    def run(
        self,
        args: Sequence[str],
        *,
        check: bool = True,
        silent: bool = False,
    ) -> CommandResult:
        """Execute ``args`` without a shell.

        Args:
            args: Program and arguments
            check: Raise when the process exits non-zero
            silent: Do not echo the command and its output to the log

        Raises:
            ToolUnavailableError: If the program cannot be started
            CcacheActionError: If ``check`` is set and the command failed
        """
