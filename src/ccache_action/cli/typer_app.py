"""
setup-ccache-action Typer CLI Application

The action runs this CLI twice per job: ``main`` before the build and
``post`` after it. ``keys`` prints the cache keys for the current
environment without touching the cache.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer

from ccache_action.cli.common.context import (
    CliContext,
    LogLevel,
    get_cli_context,
    set_cli_context,
)
from ccache_action.cli.common.error_handler import handle_cli_error
from ccache_action.cli.common.options import (
    config_option,
    json_output_option,
    log_level_option,
    store_dir_option,
    verbose_option,
    version_option,
)
from ccache_action.cli.keys_handler import handle_keys_command
from ccache_action.cli.main_handler import handle_main_command
from ccache_action.cli.post_handler import handle_post_command
from ccache_action.shared.constants import CLICommands, CLIDefaults, CLIHelp
from ccache_action.shared.logging import setup_structured_logger

__version__ = CLIDefaults.VERSION


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(CLIHelp.VERSION_TEXT.format(version=__version__))
        raise typer.Exit


def main_callback(
    verbose: int,
    log_level: LogLevel,
    json_output: bool,
    version: bool,
) -> None:
    """Set the global CLI context and configure logging."""
    if version:
        version_callback(value=True)

    context = CliContext(
        verbose=verbose,
        log_level=log_level,
        json_output=json_output,
    )
    set_cli_context(context)
    setup_structured_logger(
        level=context.get_effective_log_level(),
        json_output=context.json_output,
    )


app = typer.Typer(
    name=CLIHelp.APP_NAME,
    help=CLIHelp.APP_DESCRIPTION,
    add_completion=False,
    rich_markup_mode=CLIHelp.APP_STYLE,
    no_args_is_help=True,
    invoke_without_command=True,
)


@app.callback()
def main(
    verbose: Annotated[int, verbose_option] = 0,
    log_level: Annotated[LogLevel, log_level_option] = LogLevel.INFO,
    json_output: Annotated[bool, json_output_option] = False,
    version: Annotated[bool, version_option] = False,
) -> None:
    """Restore, configure and persist a ccache directory between CI runs."""
    try:
        main_callback(verbose, log_level, json_output, version)
    except typer.Exit:
        raise
    except Exception as e:
        exit_code = handle_cli_error(e, "main-callback", json_output=json_output)
        raise typer.Exit(exit_code) from e


def _run(command: str, handler: Callable[..., int], *args: object) -> None:
    try:
        exit_code = handler(*args)
    except (Exception, KeyboardInterrupt) as e:
        exit_code = handle_cli_error(e, command, json_output=get_cli_context().json_output)
    if exit_code != CLIDefaults.EXIT_SUCCESS:
        raise typer.Exit(exit_code)


@app.command(CLICommands.MAIN, help=CLIHelp.MAIN_HELP)
def main_command_typer(
    config: Annotated[Path | None, config_option] = None,
    store_dir: Annotated[Path | None, store_dir_option] = None,
) -> None:
    """
    Pre-build phase.

    Steps, each in its own log group:
    - check that ccache is installed
    - restore the cache directory (``restore_cache``) and set ``cache_hit``
    - apply ``ccache_options`` and clear statistics
    - prepend the compiler symlinks directory to PATH
      (``prepend_symlinks_to_path``) and export ``ccache_symlinks_path``

    Examples:
        # Run on a CI runner; inputs come from INPUT_* variables
        setup-ccache-action main

        # Local run against a directory-backed store
        setup-ccache-action main --config ccache.toml --store-dir /tmp/ccache-store
    """
    _run(CLICommands.MAIN, handle_main_command, config, store_dir)


@app.command(CLICommands.POST, help=CLIHelp.POST_HELP)
def post_command_typer(
    config: Annotated[Path | None, config_option] = None,
    store_dir: Annotated[Path | None, store_dir_option] = None,
) -> None:
    """
    Post-build phase.

    Shows statistics, stores the cache under a new timestamped key
    (``store_cache``) and removes superseded entries
    (``remove_stale_cache``). Failures are reported as warnings; this
    command always exits with status 0.
    """
    _run(CLICommands.POST, handle_post_command, config, store_dir)


@app.command(CLICommands.KEYS, help=CLIHelp.KEYS_HELP)
def keys_command_typer(
    config: Annotated[Path | None, config_option] = None,
) -> None:
    """
    Print the primary cache key and the fallback keys.

    Examples:
        GITHUB_WORKFLOW=ci GITHUB_JOB=build ImageOS=ubuntu22 setup-ccache-action keys
        setup-ccache-action --json keys
    """
    _run(CLICommands.KEYS, handle_keys_command, config)


if __name__ == "__main__":
    app()
