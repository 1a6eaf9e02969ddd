"""Pre-build phase.

Locates ccache, restores the cache directory, configures ccache from the
``ccache_options`` input, clears statistics and exposes the compiler
symlinks directory to later steps.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ccache_action.cli.runtime import ActionRuntime, create_runtime
from ccache_action.config import load_build_context, load_inputs
from ccache_action.core import RestoreOrchestrator
from ccache_action.shared.constants import CLIDefaults, CLIMessages, OutputNames
from ccache_action.shared.errors import ConfigurationError
from ccache_action.shared.logging import log_operation_error

logger = logging.getLogger(__name__)


def restore_cache(runtime: ActionRuntime) -> bool:
    """Restore the cache directory; returns the ``cache_hit`` value."""
    paths = runtime.cache_paths()
    primary_key = runtime.primary_key()
    fallback_keys = runtime.fallback_keys(primary_key)

    try:
        store = runtime.store
    except ConfigurationError as e:
        # No cache backend in this environment; restore degrades to a miss
        log_operation_error(logger, e, operation="restore_cache", level=logging.WARNING)
        return False

    orchestrator = RestoreOrchestrator(store, runtime.handoff)
    return orchestrator.restore(paths, primary_key.value, fallback_keys).cache_hit


def configure_ccache(runtime: ActionRuntime) -> None:
    # The config file is regenerated on every run
    runtime.tool.remove_config()
    runtime.tool.apply_options(runtime.inputs.ccache_options)
    runtime.tool.print_config()


def add_symlinks_to_path(runtime: ActionRuntime, symlinks_path: str) -> None:
    logger.info('ccache symlinks path: "%s"', symlinks_path)
    runtime.workflow.add_path(symlinks_path)
    logger.info("PATH=%s", runtime.workflow.environ.get("PATH", ""))


def run_main_phase(runtime: ActionRuntime) -> None:
    """Run every pre-build step in order.

    Raises:
        CcacheActionError: On the first fatal failure
    """
    workflow = runtime.workflow
    inputs = runtime.inputs

    with workflow.group("Check ccache availability"):
        runtime.tool.check_availability()

    cache_hit = False
    if inputs.restore_cache:
        with workflow.group("Restore cache"):
            cache_hit = restore_cache(runtime)
    else:
        logger.info(CLIMessages.SKIP_RESTORE)

    cache_hit_value = str(cache_hit).lower()
    with workflow.group(f'Set output variable: {OutputNames.CACHE_HIT}="{cache_hit_value}"'):
        workflow.set_output(OutputNames.CACHE_HIT, cache_hit_value)

    with workflow.group("Configure ccache"):
        configure_ccache(runtime)

    with workflow.group("Clear ccache statistics"):
        runtime.tool.zero_stats()

    symlinks_path = runtime.tool.symlinks_path()
    if inputs.prepend_symlinks_to_path:
        with workflow.group("Prepend ccache symlinks path to $PATH"):
            add_symlinks_to_path(runtime, symlinks_path)
    else:
        logger.info(CLIMessages.SKIP_SYMLINKS)

    with workflow.group("Create environment variables"):
        workflow.export_variable(OutputNames.CCACHE_SYMLINKS_PATH, symlinks_path)
        logger.info("${{ env.%s }} = %s", OutputNames.CCACHE_SYMLINKS_PATH, symlinks_path)


def handle_main_command(
    config_path: Path | None = None,
    store_dir: Path | None = None,
) -> int:
    """Load configuration and run the pre-build phase.

    Returns:
        Exit code; errors propagate to the caller's error handler
    """
    inputs = load_inputs(config_path)
    context = load_build_context()

    runtime = create_runtime(inputs, context, store_dir=store_dir)
    if runtime is None:
        logger.warning(CLIMessages.UNSUPPORTED_PLATFORM)
        return CLIDefaults.EXIT_SUCCESS

    run_main_phase(runtime)
    return CLIDefaults.EXIT_SUCCESS


__all__ = ["handle_main_command", "run_main_phase"]
