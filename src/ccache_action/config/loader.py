"""Configuration loader.

Loads action inputs (environment, optionally a TOML file) and the build
context, converting validation failures into ConfigurationError so the
CLI reports them as a single fatal message.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from pydantic import ValidationError

from ccache_action.config.models import ActionInputs, BuildContext
from ccache_action.shared.errors import ConfigurationError, ErrorCode

logger = logging.getLogger(__name__)


def _describe(error: ValidationError) -> str:
    details = "; ".join(
        f"{'.'.join(str(part) for part in item['loc']) or 'input'}: {item['msg']}"
        for item in error.errors()
    )
    return details or str(error)


def load_inputs(config_path: str | Path | None = None) -> ActionInputs:
    """Load action inputs.

    Args:
        config_path: Optional TOML file with inputs for local runs

    Returns:
        Validated ActionInputs

    Raises:
        ConfigurationError: If the file is missing or an input is invalid
    """
    try:
        if config_path:
            inputs = ActionInputs.from_toml_file(config_path)
            logger.debug("Loaded inputs from %s", config_path)
            return inputs
        return ActionInputs()
    except FileNotFoundError as e:
        raise ConfigurationError(str(e), config_key="config", original_error=e) from e
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid action input: {_describe(e)}",
            original_error=e,
            code=ErrorCode.INVALID_INPUT,
        ) from e
    except (OSError, ValueError) as e:
        # toml.TomlDecodeError is a ValueError
        raise ConfigurationError(
            f"Cannot read configuration file {config_path}: {e}",
            config_key="config",
            original_error=e,
        ) from e


def load_build_context(environ: Mapping[str, str] | None = None) -> BuildContext:
    """Load the build context from the runner environment.

    Raises:
        ConfigurationError: If a value fails validation
    """
    try:
        return BuildContext.from_env(environ)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid build context: {_describe(e)}",
            original_error=e,
            code=ErrorCode.INVALID_INPUT,
        ) from e


__all__ = ["load_build_context", "load_inputs"]
