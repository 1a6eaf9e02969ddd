"""Action input model.

The runner passes every action input as an ``INPUT_<NAME>`` environment
variable. This module maps them onto a typed settings model.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import toml
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ccache_action.shared.constants import RunnerEnv

MultilineInput = Annotated[list[str], NoDecode]


def split_multiline(value: Any) -> list[str]:
    """Split a multi-line input into trimmed, non-empty lines."""
    if value is None:
        return []
    if isinstance(value, str):
        lines = value.splitlines()
    else:
        lines = [str(item) for item in value]
    return [line.strip() for line in lines if line.strip()]


class ActionInputs(BaseSettings):
    """Inputs recognized by the action.

    Empty inputs fall back to their defaults, so an empty
    ``override_cache_key`` means "derive the default key".
    """

    model_config = SettingsConfigDict(
        env_prefix=RunnerEnv.INPUT_PREFIX,
        env_ignore_empty=True,
        extra="ignore",
    )

    override_cache_key: str = Field(
        default="",
        description="Replaces the derived cache key entirely",
    )
    override_cache_key_fallback: MultilineInput = Field(
        default_factory=list,
        description="Restore keys, most specific first",
    )
    ccache_options: MultilineInput = Field(
        default_factory=list,
        description="key=value settings passed to ccache --set-config",
    )
    restore_cache: bool = Field(default=True, description="Restore the cache before the build")
    store_cache: bool = Field(default=True, description="Store the cache after the build")
    remove_stale_cache: bool = Field(
        default=True,
        description="Delete superseded entries after a successful store",
    )
    prepend_symlinks_to_path: bool = Field(
        default=True,
        description="Prepend the ccache compiler symlinks directory to PATH",
    )
    windows_compile_environment: str = Field(
        default="msvc",
        description="Windows toolchain flavour (msvc, msys2)",
    )
    api_token: SecretStr = Field(
        default=SecretStr(""),
        description="Token used to list and delete remote cache entries",
    )

    @field_validator("override_cache_key", mode="before")
    @classmethod
    def _strip_key(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("override_cache_key_fallback", "ccache_options", mode="before")
    @classmethod
    def _split_lines(cls, value: Any) -> list[str]:
        return split_multiline(value)

    @field_validator("windows_compile_environment", mode="before")
    @classmethod
    def _normalize_environment(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> ActionInputs:
        """Load inputs from a TOML file; environment inputs take precedence.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        file_values = toml.load(file_path)
        from_env = cls()
        merged = {**file_values, **from_env.model_dump(include=from_env.model_fields_set)}
        return cls(**merged)


__all__ = ["ActionInputs", "MultilineInput", "split_multiline"]
