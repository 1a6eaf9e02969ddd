"""Post-build phase.

Shows statistics, stores the cache directory under a new timestamped
key and removes the entries it supersedes. Nothing in this phase fails
the job: every error is reported as a warning.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ccache_action.cli.common.error_handler import handle_post_error
from ccache_action.cli.runtime import ActionRuntime, create_runtime
from ccache_action.config import load_build_context, load_inputs
from ccache_action.core import PersistOrchestrator, PersistResult, StaleEntryReaper
from ccache_action.shared.constants import CLICommands, CLIDefaults, CLIMessages

logger = logging.getLogger(__name__)


def store_cache(runtime: ActionRuntime) -> PersistResult:
    # Keep the generated config file out of the archive
    runtime.tool.remove_config()

    paths = runtime.cache_paths()
    primary_key = runtime.primary_key()
    orchestrator = PersistOrchestrator(runtime.store, runtime.handoff)
    return orchestrator.persist(paths, primary_key.value)


def run_post_phase(runtime: ActionRuntime) -> None:
    """Run every post-build step in order.

    Raises:
        CcacheActionError: On a failure other than a reservation conflict
            or a reaper failure; the caller degrades it to a warning
    """
    workflow = runtime.workflow
    inputs = runtime.inputs

    with workflow.group("Show ccache statistics"):
        runtime.tool.show_stats()

    stored = False
    if inputs.store_cache:
        with workflow.group("Store cache"):
            stored = store_cache(runtime).success
    else:
        logger.info(CLIMessages.SKIP_STORE)

    if not inputs.remove_stale_cache:
        logger.info(CLIMessages.SKIP_REMOVE_STALE)
    elif stored:
        with workflow.group("Remove stale caches"):
            StaleEntryReaper(runtime.store, runtime.handoff).reap()


def handle_post_command(
    config_path: Path | None = None,
    store_dir: Path | None = None,
) -> int:
    """Load configuration and run the post-build phase.

    Returns:
        Always EXIT_SUCCESS
    """
    try:
        inputs = load_inputs(config_path)
        context = load_build_context()

        runtime = create_runtime(inputs, context, store_dir=store_dir)
        if runtime is None:
            logger.info("No operation...")
            return CLIDefaults.EXIT_SUCCESS

        run_post_phase(runtime)
    except Exception as e:  # noqa: BLE001
        handle_post_error(e, CLICommands.POST)

    return CLIDefaults.EXIT_SUCCESS


__all__ = ["handle_post_command", "run_post_phase", "store_cache"]
