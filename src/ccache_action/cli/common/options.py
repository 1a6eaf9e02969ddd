"""
Reusable Typer Options Module

Option definitions shared by the main callback and the commands.
"""

from __future__ import annotations

import typer

from ccache_action.shared.constants import CLIHelp

verbose_option = typer.Option(
    "--verbose",
    "-v",
    count=True,
    help="Enable verbose output (equivalent to --log-level DEBUG).",
)

log_level_option = typer.Option(
    "--log-level",
    case_sensitive=False,
    help="Set the logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: INFO.",
)

json_output_option = typer.Option(
    "--json",
    help="Emit JSON log lines and JSON command output.",
)

version_option = typer.Option(
    "--version",
    "-V",
    help="Show version information and exit.",
    is_eager=True,
)

config_option = typer.Option(
    "--config",
    "-c",
    help=CLIHelp.CONFIG_HELP,
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
)

store_dir_option = typer.Option(
    "--store-dir",
    envvar="SETUP_CCACHE_STORE_DIR",
    help=CLIHelp.STORE_DIR_HELP,
    file_okay=False,
    dir_okay=True,
)

__all__ = [
    "config_option",
    "json_output_option",
    "log_level_option",
    "store_dir_option",
    "verbose_option",
    "version_option",
]
