"""Fixtures for phase and command tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from ccache_action.cli.runtime import ActionRuntime
from ccache_action.config import ActionInputs
from ccache_action.core.platform import PosixStrategy
from ccache_action.services import WorkflowIO

CCACHE = "/usr/bin/ccache"


@pytest.fixture
def workflow(tmp_path: Path) -> WorkflowIO:
    """Runner I/O writing to files under a temporary directory."""
    environ = {"PATH": "/usr/bin"}
    for name in ("GITHUB_OUTPUT", "GITHUB_ENV", "GITHUB_PATH", "GITHUB_STATE"):
        path = tmp_path / "runner" / name.lower()
        path.parent.mkdir(exist_ok=True)
        path.touch()
        environ[name] = str(path)
    return WorkflowIO(environ, stream=io.StringIO())


@pytest.fixture
def make_runtime(build_context, scripted_runner, workflow, cache_dir, tmp_path, mocker):
    """Return a factory for runtimes on a linux runner with a local store."""
    mocker.patch("ccache_action.core.platform.shutil.which", return_value=CCACHE)
    scripted_runner.respond([CCACHE, "--get-config", "cache_dir"], f"{cache_dir}\n")
    scripted_runner.respond([CCACHE, "--version"], "ccache version 4.9.1\n")

    def factory(**inputs) -> ActionRuntime:
        platform = PosixStrategy(scripted_runner, system="linux", home=tmp_path / "home")
        return ActionRuntime(
            ActionInputs(**inputs),
            build_context,
            platform,
            workflow,
            store_dir=tmp_path / "store",
        )

    return factory
