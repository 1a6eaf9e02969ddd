"""Platform capability selection.

Where ccache lives, where its configuration file and compiler symlinks
are, and how commands must be invoked all depend on the runner OS and,
on Windows, on the compile environment. The variant is resolved once per
run and every platform-specific decision goes through the returned
strategy object.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import sys
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from pathlib import Path, PurePosixPath

from ccache_action.shared.constants import RunnerEnv
from ccache_action.shared.errors import create_missing_context_error
from ccache_action.shared.protocols import CommandRunnerProtocol

logger = logging.getLogger(__name__)

CCACHE = "ccache"


class PlatformVariant(str, Enum):
    """Supported runner platforms."""

    POSIX = "posix"
    WINDOWS_NATIVE = "windows-native"
    WINDOWS_MSYS2 = "windows-msys2"


class WindowsCompileEnvironment(str, Enum):
    MSVC = "msvc"
    MSYS2 = "msys2"


def normalize_system(system: str | None = None) -> str:
    """Reduce ``sys.platform`` style names to ``linux``, ``darwin`` or ``win32``."""
    system = (system or sys.platform).lower()
    if system.startswith("linux"):
        return "linux"
    if system in {"win32", "cygwin", "windows"}:
        return "win32"
    return system


class PlatformStrategy:
    """Platform specific behavior shared by all variants.

    Subclasses override the pieces that differ; the defaults describe a
    native process environment where ``ccache`` is on PATH.
    """

    variant: PlatformVariant = PlatformVariant.POSIX

    def __init__(
        self,
        runner: CommandRunnerProtocol,
        *,
        system: str,
        environ: Mapping[str, str] | None = None,
        home: Path | None = None,
    ) -> None:
        self.runner = runner
        self.system = system
        self.environ = os.environ if environ is None else environ
        self.home = home or Path.home()

    def wrap(self, args: Sequence[str]) -> list[str]:
        """Return the argument list that runs ``args`` on this platform."""
        return list(args)

    def locate_binary(self, tool: str = CCACHE) -> str | None:
        """Return the full path of ``tool``, or None if it is not installed."""
        return shutil.which(tool)

    def config_path(self, cache_dir: Callable[[], str]) -> Path:
        """Return the location of the tool's configuration file.

        Args:
            cache_dir: Callable returning the tool's cache directory; only
                invoked where the file lives inside it
        """
        if self.system == "darwin":
            return self.home / "Library" / "Preferences" / "ccache" / "ccache.conf"
        return self.home / ".ccache" / "ccache.conf"

    def symlinks_path(self, binary_path: str) -> str:
        """Return the directory of compiler-named links to the tool."""
        if self.system == "darwin":
            result = self.runner.run(["brew", "--prefix", CCACHE], silent=True)
            return f"{result.stdout.strip()}/libexec"
        return "/usr/lib/ccache"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(system={self.system!r})"


class PosixStrategy(PlatformStrategy):
    """Linux and macOS runners."""


class WindowsNativeStrategy(PlatformStrategy):
    """Windows with the MSVC toolchain.

    The compiler wrapper is ccache itself, so the directory holding the
    binary doubles as the symlinks path.
    """

    variant = PlatformVariant.WINDOWS_NATIVE

    def config_path(self, cache_dir: Callable[[], str]) -> Path:
        return Path(cache_dir()) / "ccache.conf"

    def symlinks_path(self, binary_path: str) -> str:
        return str(Path(binary_path).parent)


class Msys2Strategy(PlatformStrategy):
    """Windows with an MSYS2 installation; commands run inside its shell."""

    variant = PlatformVariant.WINDOWS_MSYS2

    def wrap(self, args: Sequence[str]) -> list[str]:
        return ["msys2", "-c", shlex.join(args)]

    def locate_binary(self, tool: str = CCACHE) -> str | None:
        result = self.runner.run(self.wrap(["which", tool]), check=False, silent=True)
        path = result.stdout.strip()
        return path if result.ok and path else None

    def config_path(self, cache_dir: Callable[[], str]) -> Path:
        return Path(cache_dir()) / "ccache.conf"

    def symlinks_path(self, binary_path: str) -> str:
        # MSYSTEM_PREFIX is only set inside the msys2 shell
        msystem = self.environ.get(RunnerEnv.MSYSTEM, "").strip()
        if not msystem:
            raise create_missing_context_error(RunnerEnv.MSYSTEM, "the msys2 ccache symlinks path")
        return str(PurePosixPath("/", msystem.lower(), "lib", "ccache", "bin"))


def resolve_platform(
    windows_compile_environment: str,
    runner: CommandRunnerProtocol,
    *,
    system: str | None = None,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> PlatformStrategy | None:
    """Select the strategy for the current runner.

    Args:
        windows_compile_environment: ``msvc`` or ``msys2``; ignored off Windows
        runner: Command runner used by the strategy
        system: Override for ``sys.platform``

    Returns:
        The platform strategy, or None when the platform is unsupported
    """
    system = normalize_system(system)
    strategy_class: type[PlatformStrategy] | None = None

    if system in {"linux", "darwin"}:
        strategy_class = PosixStrategy
    elif system == "win32":
        environment = windows_compile_environment.strip().lower()
        if environment == WindowsCompileEnvironment.MSVC.value:
            strategy_class = WindowsNativeStrategy
        elif environment == WindowsCompileEnvironment.MSYS2.value:
            strategy_class = Msys2Strategy

    if strategy_class is None:
        logger.debug(
            "Unsupported platform: system=%s, windows_compile_environment=%s",
            system,
            windows_compile_environment,
        )
        return None

    strategy = strategy_class(runner, system=system, environ=environ, home=home)
    logger.debug("Resolved platform %s", strategy.variant.value)
    return strategy


__all__ = [
    "Msys2Strategy",
    "PlatformStrategy",
    "PlatformVariant",
    "PosixStrategy",
    "WindowsCompileEnvironment",
    "WindowsNativeStrategy",
    "normalize_system",
    "resolve_platform",
]
