"""Cache store backends.

- LocalCacheStore: archives in a local directory
- GitHubCacheStore: the hosted cache service
"""

from __future__ import annotations

from .github import CacheRestApi, CacheServiceClient, GitHubCacheStore, cache_version, create_session
from .local import LocalCacheStore

__all__ = [
    "CacheRestApi",
    "CacheServiceClient",
    "GitHubCacheStore",
    "LocalCacheStore",
    "cache_version",
    "create_session",
]
