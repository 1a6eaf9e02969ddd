"""Keys command: show the cache keys a job would use."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from ccache_action.cli.common.context import get_cli_context
from ccache_action.cli.json_formatter import format_json_output, write_json_output
from ccache_action.config import load_build_context, load_inputs
from ccache_action.core import KeyBuilder
from ccache_action.shared.constants import CLICommands, CLIDefaults

logger = logging.getLogger(__name__)


def handle_keys_command(config_path: Path | None = None) -> int:
    """Print the primary key and the fallback keys, most specific first.

    Raises:
        ConfigurationError: If the job identity needed for the default key
            is missing
    """
    inputs = load_inputs(config_path)
    builder = KeyBuilder(load_build_context())

    primary_key = builder.build_primary_key(inputs.override_cache_key)
    fallback_keys = builder.build_fallback_keys(inputs.override_cache_key_fallback, primary_key)

    if get_cli_context().json_output:
        write_json_output(
            format_json_output(
                success=True,
                command=CLICommands.KEYS,
                data={
                    "primary_key": primary_key.value,
                    "is_default": primary_key.is_default,
                    "fallback_keys": fallback_keys,
                },
            )
        )
        return CLIDefaults.EXIT_SUCCESS

    typer.echo(f"primary: {primary_key.value}")
    for fallback_key in fallback_keys:
        typer.echo(f"fallback: {fallback_key}")
    return CLIDefaults.EXIT_SUCCESS


__all__ = ["handle_keys_command"]
