"""Shared value types."""

from __future__ import annotations

from .cache import PrimaryKey, StoredEntry, TimestampedEntryKey
from .command import CommandResult

__all__ = ["CommandResult", "PrimaryKey", "StoredEntry", "TimestampedEntryKey"]
