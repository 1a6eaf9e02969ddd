"""Wiring of inputs, runner I/O, platform, tool and cache store for a phase."""

from __future__ import annotations

import logging
import os
from functools import cached_property
from pathlib import Path

from ccache_action.config import ActionInputs, BuildContext
from ccache_action.core import HandoffSlot, KeyBuilder, PlatformStrategy, resolve_platform
from ccache_action.services import CcacheTool, CommandRunner, WorkflowIO
from ccache_action.services.cache_store import (
    CacheRestApi,
    CacheServiceClient,
    GitHubCacheStore,
    LocalCacheStore,
)
from ccache_action.shared.errors import create_missing_context_error
from ccache_action.shared.models import PrimaryKey
from ccache_action.shared.protocols import CacheStoreProtocol

logger = logging.getLogger(__name__)


def create_cache_store(
    inputs: ActionInputs,
    context: BuildContext,
    store_dir: Path | None = None,
) -> CacheStoreProtocol:
    """Select the cache store backend.

    A store directory selects the local backend. Otherwise the hosted
    cache service is used; listing and deleting entries additionally need
    the repository and an ``api_token``.

    Raises:
        ConfigurationError: If the hosted service is not reachable from
            this environment
    """
    if store_dir is not None:
        logger.debug("Using local cache store at %s", store_dir)
        return LocalCacheStore(store_dir)

    results_url = context.results_url.strip()
    if not results_url:
        raise create_missing_context_error("ACTIONS_RESULTS_URL", "the hosted cache service")
    runtime_token = context.require("runtime_token", "the hosted cache service")
    service = CacheServiceClient(results_url, runtime_token)

    rest_api = None
    api_token = inputs.api_token.get_secret_value()
    if api_token and context.repository.strip():
        owner, repo = context.owner_and_repo()
        rest_api = CacheRestApi(context.api_url, api_token, owner, repo)
    else:
        logger.debug("No api_token or repository; stale entries cannot be listed")

    return GitHubCacheStore(service, rest_api, ref=context.ref)


class ActionRuntime:
    """Everything a phase needs, created lazily from the inputs."""

    def __init__(
        self,
        inputs: ActionInputs,
        context: BuildContext,
        platform: PlatformStrategy,
        workflow: WorkflowIO,
        *,
        store_dir: Path | None = None,
    ) -> None:
        self.inputs = inputs
        self.context = context
        self.platform = platform
        self.workflow = workflow
        self.store_dir = store_dir

    @cached_property
    def tool(self) -> CcacheTool:
        return CcacheTool(self.platform)

    @cached_property
    def store(self) -> CacheStoreProtocol:
        return create_cache_store(self.inputs, self.context, self.store_dir)

    @cached_property
    def handoff(self) -> HandoffSlot:
        return HandoffSlot(self.workflow)

    @cached_property
    def key_builder(self) -> KeyBuilder:
        return KeyBuilder(self.context)

    def primary_key(self) -> PrimaryKey:
        return self.key_builder.build_primary_key(self.inputs.override_cache_key)

    def fallback_keys(self, primary_key: PrimaryKey) -> list[str]:
        return self.key_builder.build_fallback_keys(
            self.inputs.override_cache_key_fallback,
            primary_key,
        )

    def cache_paths(self) -> list[str]:
        return [os.path.normpath(self.tool.cache_dir())]


def create_runtime(
    inputs: ActionInputs,
    context: BuildContext,
    *,
    store_dir: Path | None = None,
    workflow: WorkflowIO | None = None,
    system: str | None = None,
) -> ActionRuntime | None:
    """Build the runtime, or return None on an unsupported platform."""
    platform = resolve_platform(
        inputs.windows_compile_environment,
        CommandRunner(),
        system=system,
    )
    if platform is None:
        return None
    return ActionRuntime(
        inputs,
        context,
        platform,
        workflow or WorkflowIO(),
        store_dir=store_dir,
    )


__all__ = ["ActionRuntime", "create_cache_store", "create_runtime"]
