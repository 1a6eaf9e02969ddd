"""Value types shared by the key builder, the orchestrators and the stores."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ccache_action.shared.constants import CacheKeys
from ccache_action.shared.errors import DomainError, ErrorCode, ErrorContext


@dataclass(frozen=True)
class PrimaryKey:
    """The logical cache key of this job.

    Attributes:
        value: The key string
        is_default: False when the user supplied ``override_cache_key``;
            an override disables partial-prefix fallback keys
    """

    value: str
    is_default: bool

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TimestampedEntryKey:
    """``{prefix}_{epoch_millis}``, the key actually written to the store."""

    prefix: str
    timestamp: int

    def __str__(self) -> str:
        return f"{self.prefix}{CacheKeys.DELIMITER}{self.timestamp}"

    @property
    def value(self) -> str:
        return str(self)

    @classmethod
    def parse(cls, key: str) -> TimestampedEntryKey:
        """Split a stored key into its logical prefix and timestamp.

        Raises:
            DomainError: If the key has no numeric ``_{timestamp}`` suffix
        """
        prefix, delimiter, suffix = key.rpartition(CacheKeys.DELIMITER)
        if not delimiter or not prefix or not suffix.isdigit():
            raise DomainError(
                ErrorCode.INVALID_ENTRY_KEY,
                f"Not a timestamped cache entry key: {key}",
                ErrorContext(operation="parse_entry_key", key=key),
            )
        return cls(prefix=prefix, timestamp=int(suffix))

    @classmethod
    def try_parse(cls, key: str) -> TimestampedEntryKey | None:
        """Like parse() but returns None for foreign keys."""
        try:
            return cls.parse(key)
        except DomainError:
            return None


@dataclass(frozen=True)
class StoredEntry:
    """A remote cache record. Entries are never mutated in place."""

    key: str
    created_at: datetime | None = None
    size_in_bytes: int | None = None
    entry_id: int | None = field(default=None, compare=False)

    @property
    def entry_key(self) -> TimestampedEntryKey | None:
        return TimestampedEntryKey.try_parse(self.key)


__all__ = ["PrimaryKey", "StoredEntry", "TimestampedEntryKey"]
