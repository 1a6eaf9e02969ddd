"""Gzip tar archives of one or more cache directories.

Every path is stored under its index (``0/``, ``1/``...) so an archive can
be unpacked into the same list of paths on a runner with a different
home directory.
"""

from __future__ import annotations

import logging
import tarfile
from collections.abc import Sequence
from pathlib import Path

from ccache_action.shared.errors import ErrorCode, ErrorContext, TransientStoreError
from ccache_action.shared.protocols import PathLike

logger = logging.getLogger(__name__)


def _archive_error(message: str, archive_path: Path, error: Exception) -> TransientStoreError:
    return TransientStoreError(
        ErrorCode.CACHE_ARCHIVE_FAILED,
        message,
        ErrorContext(operation="archive", additional_data={"archive": archive_path}),
        original_error=error,
    )


def create_archive(paths: Sequence[PathLike], archive_path: Path) -> int:
    """Pack ``paths`` into ``archive_path``.

    Missing paths are skipped with a warning.

    Returns:
        Size of the written archive in bytes

    Raises:
        TransientStoreError: If the archive cannot be written
    """
    try:
        with tarfile.open(archive_path, "w:gz") as archive:
            for index, path in enumerate(paths):
                path = Path(path)
                if not path.exists():
                    logger.warning("Path does not exist and will not be cached: %s", path)
                    continue
                archive.add(path, arcname=str(index))
    except (OSError, tarfile.TarError) as e:
        raise _archive_error(f"Cannot create cache archive: {e}", archive_path, e) from e

    size = archive_path.stat().st_size
    logger.debug("Created archive %s (%d bytes)", archive_path, size)
    return size


def extract_archive(archive_path: Path, paths: Sequence[PathLike]) -> None:
    """Unpack an archive made by create_archive() into ``paths``.

    Members outside the indexed directories, and members that would escape
    their target directory, are rejected by the tarfile data filter.

    Raises:
        TransientStoreError: If the archive is corrupt or cannot be unpacked
    """
    try:
        with tarfile.open(archive_path, "r:gz") as archive:
            members = archive.getmembers()
            for index, path in enumerate(paths):
                target = Path(path)
                prefix = f"{index}/"
                selected = [
                    member.replace(name=member.name[len(prefix):], deep=False)
                    for member in members
                    if member.name.startswith(prefix)
                ]
                target.mkdir(parents=True, exist_ok=True)
                archive.extractall(target, members=selected, filter="data")
                logger.debug("Extracted %d members into %s", len(selected), target)
    except (OSError, tarfile.TarError) as e:
        raise _archive_error(f"Cannot extract cache archive: {e}", archive_path, e) from e


__all__ = ["create_archive", "extract_archive"]
