"""Adapter around the ccache command line tool."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

from ccache_action.core.platform import CCACHE, PlatformStrategy
from ccache_action.shared.errors import ApplicationError, ErrorCode, ErrorContext, ToolUnavailableError
from ccache_action.shared.models import CommandResult

logger = logging.getLogger(__name__)

_VERSION_PATTERN = re.compile(r"version (\S+)")
_CACHE_DIR_PATTERN = re.compile(r"cache_dir = (.+)")


def parse_version(output: str) -> tuple[int, ...]:
    """Extract ``(major, minor, ...)`` from ``ccache --version`` output.

    Returns an empty tuple if no version can be found.
    """
    match = _VERSION_PATTERN.search(output)
    if not match:
        return ()
    parts = []
    for part in match.group(1).split("."):
        digits = re.match(r"\d+", part)
        if not digits:
            break
        parts.append(int(digits.group()))
    return tuple(parts)


def parse_option(setting: str) -> tuple[str, str] | None:
    """Split a ``key=value`` option line, None if it has no ``=``."""
    key, separator, value = setting.partition("=")
    if not separator or not key.strip():
        return None
    return key.strip(), value.strip()


class CcacheTool:
    """Locate, configure and query ccache on the current platform."""

    def __init__(self, platform: PlatformStrategy) -> None:
        self.platform = platform
        self._binary_path: str | None = None
        self._cache_dir: str | None = None

    @property
    def binary_path(self) -> str:
        """Full path of the ccache binary, looked up once.

        Raises:
            ToolUnavailableError: If ccache is not installed
        """
        if self._binary_path is None:
            path = self.platform.locate_binary(CCACHE)
            if not path:
                raise ToolUnavailableError(CCACHE)
            self._binary_path = path
        return self._binary_path

    def run(self, *args: str, check: bool = True, silent: bool = False) -> CommandResult:
        return self.platform.runner.run(
            self.platform.wrap([self.binary_path, *args]),
            check=check,
            silent=silent,
        )

    def check_availability(self) -> str:
        """Verify ccache can be found and print its version."""
        path = self.binary_path
        logger.info('Found ccache at: "%s"', path)
        self.run("--version")
        return path

    def version(self) -> tuple[int, ...]:
        result = self.run("--version", check=False, silent=True)
        if not result.ok:
            return ()
        return parse_version(result.stdout)

    def cache_dir(self) -> str:
        """Return the directory ccache stores its objects in.

        ``--get-config`` is missing on ccache 3.4 and older, so the value
        is parsed from ``-p`` output when it fails.

        Raises:
            ApplicationError: If neither command reports a cache directory
        """
        if self._cache_dir is not None:
            return self._cache_dir

        result = self.run("--get-config", "cache_dir", check=False, silent=True)
        cache_dir = result.stdout.strip() if result.ok else ""

        if not cache_dir:
            config = self.run("-p", check=False, silent=True)
            match = _CACHE_DIR_PATTERN.search(config.stdout)
            cache_dir = match.group(1).strip() if match else ""

        if not cache_dir:
            raise ApplicationError(
                ErrorCode.TOOL_COMMAND_FAILED,
                "Cannot determine the ccache cache directory",
                ErrorContext(operation="get_cache_dir"),
            )

        self._cache_dir = cache_dir
        return cache_dir

    def config_path(self) -> Path:
        return self.platform.config_path(self.cache_dir)

    def remove_config(self) -> None:
        """Delete the config file so it is regenerated each run and not archived."""
        path = self.config_path()
        try:
            path.unlink()
            logger.debug("Removed ccache config %s", path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug("Cannot remove ccache config %s: %s", path, e)

    def set_config(self, key: str, value: str) -> None:
        self.run("--set-config", f"{key}={value}")

    def apply_options(self, settings: Sequence[str]) -> list[tuple[str, str]]:
        """Apply ``key=value`` lines with ``--set-config``.

        Lines without ``=`` are skipped with a warning.

        Returns:
            The options that were applied
        """
        applied = []
        for setting in settings:
            option = parse_option(setting)
            if option is None:
                logger.warning('Ignoring ccache option without "=": "%s"', setting)
                continue
            self.set_config(*option)
            applied.append(option)
        return applied

    def print_config(self) -> None:
        # --show-config is missing on older versions
        self.run("-p")

    def zero_stats(self) -> None:
        self.run("--zero-stats")

    def show_stats(self) -> None:
        args = ["--show-stats"]
        version = self.version()
        if version and version[0] >= 4:
            args += ["--verbose", "--verbose"]
        self.run(*args)

    def symlinks_path(self) -> str:
        return self.platform.symlinks_path(self.binary_path)


__all__ = ["CcacheTool", "parse_option", "parse_version"]
