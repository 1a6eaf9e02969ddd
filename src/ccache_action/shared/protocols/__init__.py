"""Protocol definitions for dependency inversion.

Core modules use these interfaces without importing from the services layer.
"""

from __future__ import annotations

from .services import (
    CacheStoreProtocol,
    CommandRunnerProtocol,
    PathLike,
    StateChannelProtocol,
)

__all__ = [
    "CacheStoreProtocol",
    "CommandRunnerProtocol",
    "PathLike",
    "StateChannelProtocol",
]
