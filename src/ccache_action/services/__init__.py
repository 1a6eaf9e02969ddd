"""Services layer: adapters for processes, the runner and cache stores."""

from __future__ import annotations

from .cache_store import GitHubCacheStore, LocalCacheStore
from .ccache_tool import CcacheTool
from .command_runner import CommandRunner
from .workflow import WorkflowIO

__all__ = [
    "CcacheTool",
    "CommandRunner",
    "GitHubCacheStore",
    "LocalCacheStore",
    "WorkflowIO",
]
