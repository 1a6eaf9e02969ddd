"""
Constants Module

Centralized constants for the action. All magic values are defined here
to keep key composition and runner plumbing consistent across modules.
"""

from .cache import ArchiveConfig, CacheKeys, PersistConfig, StateNames
from .cli import CLICommands, CLIDefaults, CLIHelp, CLIMessages
from .workflow import GitHubApi, InputNames, OutputNames, RunnerEnv

__all__ = [
    "ArchiveConfig",
    "CLICommands",
    "CLIDefaults",
    "CLIHelp",
    "CLIMessages",
    "CacheKeys",
    "GitHubApi",
    "InputNames",
    "OutputNames",
    "PersistConfig",
    "RunnerEnv",
    "StateNames",
]
