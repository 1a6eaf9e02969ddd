"""Formatting of runner workflow commands (``::name key=value::message``)."""

from __future__ import annotations


def escape_data(value: str) -> str:
    """Escape a command message so it stays on one line."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    """Escape a command property value."""
    return (
        escape_data(value)
        .replace(":", "%3A")
        .replace(",", "%2C")
    )


def format_command(command: str, message: str = "", **properties: str) -> str:
    """Render a workflow command line.

    Args:
        command: Command name, e.g. ``warning`` or ``group``
        message: Command payload
        **properties: Optional command properties (``title``, ``file``...)

    Returns:
        The command line without a trailing newline

    Example:
        >>> format_command("warning", "disk almost full", title="ccache")
        '::warning title=ccache::disk almost full'
    """
    line = f"::{command}"
    if properties:
        rendered = ",".join(
            f"{name}={escape_property(str(value))}"
            for name, value in properties.items()
            if value
        )
        if rendered:
            line += f" {rendered}"
    return f"{line}::{escape_data(message)}"
