"""
CLI Configuration Constants

This module contains all constants related to command-line interface
configuration, default values, and user-facing messages.
"""


class CLIDefaults:
    """Default CLI values."""

    VERSION = "1.0.0"
    EXIT_SUCCESS = 0
    EXIT_ERROR = 1
    EXIT_INTERRUPTED = 130


class CLICommands:
    """CLI command names."""

    MAIN = "main"
    POST = "post"
    KEYS = "keys"


class CLIHelp:
    """Help text for the CLI."""

    APP_NAME = "setup-ccache-action"
    APP_DESCRIPTION = (
        "Restore, configure and persist a ccache directory between CI runs."
    )
    APP_STYLE = "rich"
    VERSION_TEXT = "setup-ccache-action v{version}"

    MAIN_HELP = "Pre-build phase: locate ccache, restore the cache and configure it."
    POST_HELP = "Post-build phase: show statistics, store the cache and prune stale entries."
    KEYS_HELP = "Print the primary cache key and the fallback keys."
    CONFIG_HELP = "TOML file with action inputs (environment values take precedence)."
    STORE_DIR_HELP = "Use a directory-backed cache store instead of the hosted cache service."


class CLIMessages:
    """Messages shown to the user."""

    UNSUPPORTED_PLATFORM = (
        'setup-ccache-action only supports "ubuntu", "macos" and "windows" '
        "(msvc, msys2) platforms. No operation..."
    )
    SKIP_RESTORE = "Skip restore cache..."
    SKIP_STORE = "Skip store cache..."
    SKIP_REMOVE_STALE = "Skip remove stale caches..."
    SKIP_SYMLINKS = "Skip prepend ccache symlinks path to $PATH..."


__all__ = ["CLICommands", "CLIDefaults", "CLIHelp", "CLIMessages"]
