"""Directory-backed cache store.

One gzip tar archive per key, named after the URL-quoted key. Writes are
published with a hard link, which fails atomically when the key already
exists, so entries are immutable in the same way as on the hosted cache
service. Used on self-hosted runners and in tests.
"""

from __future__ import annotations

import logging
import os
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import quote, unquote

from ccache_action.services.cache_store.archive import create_archive, extract_archive
from ccache_action.shared.constants import ArchiveConfig
from ccache_action.shared.errors import (
    ErrorCode,
    ErrorContext,
    ReservationConflictError,
    TransientStoreError,
)
from ccache_action.shared.models import StoredEntry
from ccache_action.shared.protocols import PathLike

logger = logging.getLogger(__name__)


class LocalCacheStore:
    """Cache store keeping archives in a local directory."""

    def __init__(self, root: PathLike) -> None:
        self.root = Path(root)

    def _archive_path(self, key: str) -> Path:
        return self.root / f"{quote(key, safe='')}{ArchiveConfig.EXTENSION}"

    def _entry(self, path: Path) -> StoredEntry:
        stat = path.stat()
        return StoredEntry(
            key=unquote(path.name[: -len(ArchiveConfig.EXTENSION)]),
            created_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            size_in_bytes=stat.st_size,
        )

    def _all_entries(self) -> list[tuple[int, StoredEntry]]:
        if not self.root.is_dir():
            return []
        entries = []
        for path in self.root.glob(f"*{ArchiveConfig.EXTENSION}"):
            try:
                entries.append((path.stat().st_mtime_ns, self._entry(path)))
            except FileNotFoundError:
                # deleted concurrently
                continue
        return entries

    def list_entries(self, key_prefix: str) -> list[StoredEntry]:
        try:
            entries = [
                (mtime, entry)
                for mtime, entry in self._all_entries()
                if entry.key.startswith(key_prefix)
            ]
        except OSError as e:
            raise TransientStoreError(
                ErrorCode.CACHE_LIST_FAILED,
                f"Cannot list cache entries in {self.root}: {e}",
                ErrorContext(operation="list_entries", key=key_prefix),
                original_error=e,
            ) from e
        entries.sort(key=lambda item: (item[0], item[1].key))
        return [entry for _, entry in entries]

    def _resolve(self, primary_key: str, fallback_keys: Sequence[str]) -> str | None:
        """Pick the entry to restore.

        For each fallback key the newest entry of that exact key family
        (``{fallback_key}_{ts}``) wins. Only when the family is empty does
        a plain prefix match apply, so a default-branch key never restores
        a longer pull-request family while its own entries exist.
        """
        if self._archive_path(primary_key).exists():
            return primary_key
        for fallback_key in fallback_keys:
            if self._archive_path(fallback_key).exists():
                return fallback_key
            candidates = self.list_entries(fallback_key)
            family = [
                entry
                for entry in candidates
                if entry.entry_key is not None and entry.entry_key.prefix == fallback_key
            ]
            if family:
                return family[-1].key
            if candidates:
                return candidates[-1].key
        return None

    def fetch(
        self,
        paths: Sequence[PathLike],
        primary_key: str,
        fallback_keys: Sequence[str],
    ) -> str | None:
        matched_key = self._resolve(primary_key, fallback_keys)
        if matched_key is None:
            return None
        try:
            extract_archive(self._archive_path(matched_key), paths)
        except TransientStoreError as e:
            raise TransientStoreError(
                ErrorCode.CACHE_FETCH_FAILED,
                f"Cannot restore cache entry {matched_key}: {e.message}",
                ErrorContext(operation="fetch", key=matched_key),
                original_error=e,
            ) from e
        return matched_key

    def store(self, paths: Sequence[PathLike], key: str) -> None:
        destination = self._archive_path(key)
        if destination.exists():
            raise ReservationConflictError(key)

        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TransientStoreError(
                ErrorCode.CACHE_STORE_UNAVAILABLE,
                f"Cannot create cache store directory {self.root}: {e}",
                ErrorContext(operation="store", key=key),
                original_error=e,
            ) from e

        staging = self.root / f".staging-{uuid.uuid4().hex}{ArchiveConfig.EXTENSION}"
        try:
            create_archive(paths, staging)
            try:
                os.link(staging, destination)
            except FileExistsError as e:
                raise ReservationConflictError(key, original_error=e) from e
            except OSError as e:
                raise TransientStoreError(
                    ErrorCode.CACHE_UPLOAD_FAILED,
                    f"Cannot publish cache entry {key}: {e}",
                    ErrorContext(operation="store", key=key),
                    original_error=e,
                ) from e
        finally:
            staging.unlink(missing_ok=True)
        logger.debug("Stored %s", destination)

    def delete_entry(self, key: str) -> list[StoredEntry]:
        path = self._archive_path(key)
        try:
            entry = self._entry(path)
            path.unlink()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise TransientStoreError(
                ErrorCode.CACHE_STORE_UNAVAILABLE,
                f"Cannot delete cache entry {key}: {e}",
                ErrorContext(operation="delete_entry", key=key),
                original_error=e,
            ) from e
        return [entry]


__all__ = ["LocalCacheStore"]
