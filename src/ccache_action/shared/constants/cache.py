"""Cache key and persistence constants."""


class CacheKeys:
    """Cache key composition constants."""

    NAMESPACE = "setup-ccache-action"
    DELIMITER = "_"

    # Separator between actor and branch in the pull-request segment
    ACTOR_BRANCH_SEPARATOR = "-"


class PersistConfig:
    """Persist phase constants."""

    # The remote store rejects an existing key, so each attempt gets a new timestamp
    MAX_UPLOAD_RETRIES = 10


class StateNames:
    """Names of the cross-phase handoff slots."""

    FOUND_CACHE_KEY = "setup-ccache-action_found-cache-key"
    STORED_CACHE_KEY = "setup-ccache-action_stored-cache-key"


class ArchiveConfig:
    """Archive format used by the cache store backends."""

    COMPRESSION = "gzip"
    EXTENSION = ".tar.gz"
    VERSION_SALT = "1.0"


__all__ = ["ArchiveConfig", "CacheKeys", "PersistConfig", "StateNames"]
