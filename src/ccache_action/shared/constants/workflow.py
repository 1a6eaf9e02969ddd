"""Hosting CI workflow constants.

Names of the environment variables and files the runner uses to pass
inputs in and to receive outputs, exported variables and state back.
"""


class InputNames:
    """Recognized action inputs."""

    OVERRIDE_CACHE_KEY = "override_cache_key"
    OVERRIDE_CACHE_KEY_FALLBACK = "override_cache_key_fallback"
    CCACHE_OPTIONS = "ccache_options"
    RESTORE_CACHE = "restore_cache"
    STORE_CACHE = "store_cache"
    REMOVE_STALE_CACHE = "remove_stale_cache"
    PREPEND_SYMLINKS_TO_PATH = "prepend_symlinks_to_path"
    WINDOWS_COMPILE_ENVIRONMENT = "windows_compile_environment"
    API_TOKEN = "api_token"  # noqa: S105  # nosec B105 - input name


class OutputNames:
    """Job outputs and exported variables."""

    CACHE_HIT = "cache_hit"
    CCACHE_SYMLINKS_PATH = "ccache_symlinks_path"


class RunnerEnv:
    """Environment variables provided by the runner."""

    INPUT_PREFIX = "INPUT_"
    STATE_PREFIX = "STATE_"

    GITHUB_ACTIONS = "GITHUB_ACTIONS"
    GITHUB_OUTPUT = "GITHUB_OUTPUT"
    GITHUB_ENV = "GITHUB_ENV"
    GITHUB_PATH = "GITHUB_PATH"
    GITHUB_STATE = "GITHUB_STATE"

    GITHUB_WORKFLOW = "GITHUB_WORKFLOW"
    GITHUB_JOB = "GITHUB_JOB"
    IMAGE_OS = "ImageOS"
    GITHUB_HEAD_REF = "GITHUB_HEAD_REF"
    GITHUB_ACTOR = "GITHUB_ACTOR"
    GITHUB_REF = "GITHUB_REF"
    GITHUB_REPOSITORY = "GITHUB_REPOSITORY"
    MSYSTEM = "MSYSTEM"


class GitHubApi:
    """Remote cache service endpoints."""

    DEFAULT_API_URL = "https://api.github.com"
    API_VERSION = "2022-11-28"
    ACCEPT = "application/vnd.github+json"
    CACHES_PATH = "/repos/{owner}/{repo}/actions/caches"
    PAGE_SIZE = 100

    CACHE_SERVICE_PREFIX = "twirp/github.actions.results.api.v1.CacheService/"
    GET_DOWNLOAD_URL = "GetCacheEntryDownloadURL"
    CREATE_ENTRY = "CreateCacheEntry"
    FINALIZE_UPLOAD = "FinalizeCacheEntryUpload"

    REQUEST_TIMEOUT = 30
    TRANSFER_TIMEOUT = 600

    HTTP_FORBIDDEN = 403
    HTTP_NOT_FOUND = 404
    HTTP_CONFLICT = 409


__all__ = ["GitHubApi", "InputNames", "OutputNames", "RunnerEnv"]
