"""Hosted cache service backend.

Two APIs are involved:

- The cache service (twirp JSON endpoints under ``ACTIONS_RESULTS_URL``)
  resolves keys to signed blob URLs for download and reserves new
  entries for upload. Only the runtime token of a running job may call it.
- The REST API (``/repos/{owner}/{repo}/actions/caches``) lists and
  deletes entries with the ``api_token`` input. Deletion is limited to
  the scope of the token, which a pull request run usually lacks.
"""

from __future__ import annotations

import hashlib
import logging
import sys
import tempfile
import time
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ccache_action.services.cache_store.archive import create_archive, extract_archive
from ccache_action.shared.constants import ArchiveConfig, CLIDefaults, GitHubApi
from ccache_action.shared.errors import (
    ErrorCode,
    ErrorContext,
    ReservationConflictError,
    ScopePermissionError,
    TransientStoreError,
)
from ccache_action.shared.logging import log_api_call
from ccache_action.shared.models import StoredEntry
from ccache_action.shared.protocols import PathLike

logger = logging.getLogger(__name__)

# Signed blob URLs carry their own credentials
_BLOB_HEADERS: dict[str, Any] = {"Authorization": None}


def create_session(token: str = "") -> requests.Session:
    """Create a session that retries idempotent requests on 5xx responses."""
    session = requests.Session()

    retry_strategy = Retry(
        total=3,
        status_forcelist=[500, 502, 503, 504],
        backoff_factor=1,
        allowed_methods=["HEAD", "GET", "OPTIONS", "DELETE"],
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)

    session.headers["User-Agent"] = f"setup-ccache-action/{CLIDefaults.VERSION}"
    if token:
        session.headers["Authorization"] = f"Bearer {token}"

    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


def cache_version(paths: Sequence[PathLike], platform: str | None = None) -> str:
    """Version hash binding an entry to its paths and archive format.

    Entries are only restored by jobs producing the same version, so a
    different path list or compression method never matches.
    """
    components = [str(path) for path in paths]
    components.append(ArchiveConfig.COMPRESSION)
    if (platform or sys.platform) == "win32":
        components.append("windows-only")
    components.append(ArchiveConfig.VERSION_SALT)
    return hashlib.sha256("|".join(components).encode("utf-8")).hexdigest()


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _to_entry(payload: dict[str, Any]) -> StoredEntry:
    return StoredEntry(
        key=payload["key"],
        created_at=_parse_timestamp(payload.get("created_at")),
        size_in_bytes=payload.get("size_in_bytes"),
        entry_id=payload.get("id"),
    )


def _transient(
    code: ErrorCode,
    message: str,
    operation: str,
    key: str | None,
    error: Exception | None = None,
) -> TransientStoreError:
    return TransientStoreError(
        code,
        message,
        ErrorContext(operation=operation, key=key),
        original_error=error,
    )


class CacheServiceClient:
    """Client for the cache service twirp endpoints and signed blob URLs."""

    def __init__(
        self,
        results_url: str,
        runtime_token: str,
        session: requests.Session | None = None,
    ) -> None:
        if not results_url:
            msg = "ACTIONS_RESULTS_URL is required to use the hosted cache service"
            raise ValueError(msg)
        self.base_url = results_url.rstrip("/") + "/" + GitHubApi.CACHE_SERVICE_PREFIX
        self.session = session or create_session(runtime_token)

    def _call(self, method: str, payload: dict[str, Any], key: str) -> tuple[int, dict[str, Any]]:
        url = self.base_url + method
        start = time.monotonic()
        try:
            response = self.session.post(url, json=payload, timeout=GitHubApi.REQUEST_TIMEOUT)
        except requests.exceptions.RequestException as e:
            log_api_call(logger, url, "POST")
            raise _transient(
                ErrorCode.CACHE_STORE_UNAVAILABLE,
                f"Cache service request {method} failed: {e}",
                method,
                key,
                e,
            ) from e
        log_api_call(logger, url, "POST", response.status_code, (time.monotonic() - start) * 1000)

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {}
        return response.status_code, body

    def get_download_url(self, key: str, restore_keys: Sequence[str], version: str) -> tuple[str, str] | None:
        """Resolve the best matching entry.

        Returns:
            ``(matched_key, signed_download_url)``, or None on a miss
        """
        status, body = self._call(
            GitHubApi.GET_DOWNLOAD_URL,
            {"key": key, "restore_keys": list(restore_keys), "version": version},
            key,
        )
        if status == GitHubApi.HTTP_NOT_FOUND:
            return None
        if status >= 400:
            raise _transient(
                ErrorCode.CACHE_FETCH_FAILED,
                f"Cache lookup failed with HTTP {status}: {body.get('msg', '')}".rstrip(": "),
                GitHubApi.GET_DOWNLOAD_URL,
                key,
            )
        if not body.get("ok"):
            return None
        download_url = body.get("signed_download_url")
        if not download_url:
            raise _transient(
                ErrorCode.CACHE_FETCH_FAILED,
                "Cache lookup response has no download URL",
                GitHubApi.GET_DOWNLOAD_URL,
                key,
            )
        return body.get("matched_key") or key, download_url

    def create_entry(self, key: str, version: str) -> str:
        """Reserve ``key`` and return the signed upload URL.

        Raises:
            ReservationConflictError: If the key exists or is being written
        """
        status, body = self._call(GitHubApi.CREATE_ENTRY, {"key": key, "version": version}, key)
        if status == GitHubApi.HTTP_CONFLICT:
            raise ReservationConflictError(key)
        if status >= 400:
            raise _transient(
                ErrorCode.CACHE_UPLOAD_FAILED,
                f"Cache reservation failed with HTTP {status}: {body.get('msg', '')}".rstrip(": "),
                GitHubApi.CREATE_ENTRY,
                key,
            )
        if not body.get("ok"):
            raise ReservationConflictError(
                key,
                f"Unable to reserve cache with key {key}, another job may be creating this cache.",
            )
        upload_url = body.get("signed_upload_url")
        if not upload_url:
            raise _transient(
                ErrorCode.CACHE_UPLOAD_FAILED,
                "Cache reservation response has no upload URL",
                GitHubApi.CREATE_ENTRY,
                key,
            )
        return upload_url

    def finalize(self, key: str, version: str, size_bytes: int) -> int | None:
        status, body = self._call(
            GitHubApi.FINALIZE_UPLOAD,
            {"key": key, "version": version, "size_bytes": str(size_bytes)},
            key,
        )
        if status >= 400 or not body.get("ok"):
            raise _transient(
                ErrorCode.CACHE_UPLOAD_FAILED,
                f"Cannot finalize cache entry {key} (HTTP {status})",
                GitHubApi.FINALIZE_UPLOAD,
                key,
            )
        entry_id = body.get("entry_id")
        return int(entry_id) if entry_id is not None else None

    def download(self, url: str, destination: Path, key: str) -> None:
        try:
            with self.session.get(
                url,
                headers=_BLOB_HEADERS,
                stream=True,
                timeout=GitHubApi.TRANSFER_TIMEOUT,
            ) as response:
                response.raise_for_status()
                with destination.open("wb") as file:
                    for chunk in response.iter_content(chunk_size=1024 * 1024):
                        file.write(chunk)
        except (requests.exceptions.RequestException, OSError) as e:
            raise _transient(
                ErrorCode.CACHE_FETCH_FAILED,
                f"Cannot download cache entry {key}: {e}",
                "download",
                key,
                e,
            ) from e

    def upload(self, url: str, source: Path, key: str) -> None:
        try:
            with source.open("rb") as file:
                response = self.session.put(
                    url,
                    data=file,
                    headers={
                        **_BLOB_HEADERS,
                        "x-ms-blob-type": "BlockBlob",
                        "Content-Type": "application/octet-stream",
                    },
                    timeout=GitHubApi.TRANSFER_TIMEOUT,
                )
            response.raise_for_status()
        except (requests.exceptions.RequestException, OSError) as e:
            raise _transient(
                ErrorCode.CACHE_UPLOAD_FAILED,
                f"Cannot upload cache entry {key}: {e}",
                "upload",
                key,
                e,
            ) from e


class CacheRestApi:
    """List and delete cache entries through the REST API."""

    def __init__(
        self,
        api_url: str,
        token: str,
        owner: str,
        repo: str,
        session: requests.Session | None = None,
    ) -> None:
        self.url = api_url.rstrip("/") + GitHubApi.CACHES_PATH.format(owner=owner, repo=repo)
        self.session = session or create_session(token)
        self.session.headers["Accept"] = GitHubApi.ACCEPT
        self.session.headers["X-GitHub-Api-Version"] = GitHubApi.API_VERSION

    def _request(self, method: str, params: dict[str, Any], operation: str, key: str) -> dict[str, Any]:
        start = time.monotonic()
        try:
            response = self.session.request(method, self.url, params=params, timeout=GitHubApi.REQUEST_TIMEOUT)
        except requests.exceptions.RequestException as e:
            log_api_call(logger, self.url, method)
            code = ErrorCode.CACHE_LIST_FAILED if method == "GET" else ErrorCode.CACHE_STORE_UNAVAILABLE
            raise _transient(code, f"{method} {self.url} failed: {e}", operation, key, e) from e
        log_api_call(logger, self.url, method, response.status_code, (time.monotonic() - start) * 1000)

        if response.status_code == GitHubApi.HTTP_FORBIDDEN:
            raise ScopePermissionError(
                ErrorCode.CACHE_DELETE_FORBIDDEN,
                f"Resource not accessible by the token (HTTP 403) for key {key}",
                ErrorContext(operation=operation, key=key),
            )
        if response.status_code >= 400:
            code = ErrorCode.CACHE_LIST_FAILED if method == "GET" else ErrorCode.CACHE_STORE_UNAVAILABLE
            raise _transient(code, f"{method} {self.url} failed with HTTP {response.status_code}", operation, key)
        try:
            return response.json()
        except ValueError as e:
            raise _transient(ErrorCode.CACHE_LIST_FAILED, f"Invalid JSON from {self.url}", operation, key, e) from e

    def list_caches(self, key_prefix: str, ref: str = "") -> list[StoredEntry]:
        """Return all entries matching ``key_prefix``, oldest first."""
        entries: list[StoredEntry] = []
        page = 1
        while True:
            params: dict[str, Any] = {
                "key": key_prefix,
                "sort": "created_at",
                "direction": "asc",
                "per_page": GitHubApi.PAGE_SIZE,
                "page": page,
            }
            if ref:
                params["ref"] = ref
            body = self._request("GET", params, "list_entries", key_prefix)
            caches = body.get("actions_caches") or []
            entries.extend(_to_entry(cache) for cache in caches)
            total = body.get("total_count", len(entries))
            if not caches or len(entries) >= total:
                return entries
            page += 1

    def delete_caches(self, key: str, ref: str = "") -> list[StoredEntry]:
        """Delete entries named ``key`` and return what was removed."""
        params = {"key": key}
        if ref:
            params["ref"] = ref
        body = self._request("DELETE", params, "delete_entry", key)
        return [_to_entry(cache) for cache in body.get("actions_caches") or []]


class GitHubCacheStore:
    """Cache store backed by the hosted cache service."""

    def __init__(
        self,
        service: CacheServiceClient,
        rest_api: CacheRestApi | None,
        *,
        ref: str = "",
        platform: str | None = None,
    ) -> None:
        self.service = service
        self.rest_api = rest_api
        self.ref = ref
        self.platform = platform

    def _require_rest_api(self, operation: str, key: str) -> CacheRestApi:
        if self.rest_api is None:
            raise _transient(
                ErrorCode.CACHE_STORE_UNAVAILABLE,
                "Listing and deleting cache entries requires a repository and an api_token",
                operation,
                key,
            )
        return self.rest_api

    def fetch(
        self,
        paths: Sequence[PathLike],
        primary_key: str,
        fallback_keys: Sequence[str],
    ) -> str | None:
        version = cache_version(paths, self.platform)
        resolved = self.service.get_download_url(primary_key, fallback_keys, version)
        if resolved is None:
            return None
        matched_key, url = resolved
        with tempfile.TemporaryDirectory(prefix="ccache-action-") as temp_dir:
            archive_path = Path(temp_dir) / f"cache{ArchiveConfig.EXTENSION}"
            self.service.download(url, archive_path, matched_key)
            extract_archive(archive_path, paths)
        return matched_key

    def store(self, paths: Sequence[PathLike], key: str) -> None:
        version = cache_version(paths, self.platform)
        with tempfile.TemporaryDirectory(prefix="ccache-action-") as temp_dir:
            archive_path = Path(temp_dir) / f"cache{ArchiveConfig.EXTENSION}"
            size = create_archive(paths, archive_path)
            upload_url = self.service.create_entry(key, version)
            self.service.upload(upload_url, archive_path, key)
            entry_id = self.service.finalize(key, version, size)
        logger.debug("Cache entry %s finalized (id=%s, %d bytes)", key, entry_id, size)

    def list_entries(self, key_prefix: str) -> list[StoredEntry]:
        entries = self._require_rest_api("list_entries", key_prefix).list_caches(key_prefix, self.ref)
        return [entry for entry in entries if entry.key.startswith(key_prefix)]

    def delete_entry(self, key: str) -> list[StoredEntry]:
        return self._require_rest_api("delete_entry", key).delete_caches(key, self.ref)


__all__ = [
    "CacheRestApi",
    "CacheServiceClient",
    "GitHubCacheStore",
    "cache_version",
    "create_session",
]
