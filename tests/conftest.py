"""
Pytest configuration and shared fixtures for setup-ccache-action tests.

Provides in-memory doubles for the cache store and the runner state
channel, and keeps the runner environment of the machine running the
tests out of every test.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

import pytest

from ccache_action.config import BuildContext
from ccache_action.core import HandoffSlot
from ccache_action.shared.errors import ReservationConflictError
from ccache_action.shared.models import CommandResult, StoredEntry

RUNNER_VARIABLES = (
    "GITHUB_ACTIONS",
    "GITHUB_OUTPUT",
    "GITHUB_ENV",
    "GITHUB_PATH",
    "GITHUB_STATE",
    "GITHUB_WORKFLOW",
    "GITHUB_JOB",
    "GITHUB_HEAD_REF",
    "GITHUB_ACTOR",
    "GITHUB_REF",
    "GITHUB_REPOSITORY",
    "GITHUB_API_URL",
    "ACTIONS_RESULTS_URL",
    "ACTIONS_RUNTIME_TOKEN",
    "ImageOS",
    "MSYSTEM",
    "SETUP_CCACHE_STORE_DIR",
)


@pytest.fixture(autouse=True)
def clean_runner_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove runner variables, action inputs and saved state."""
    for name in RUNNER_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith(("INPUT_", "STATE_")):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_action_logger() -> None:
    """Undo handler setup done by CLI tests so caplog sees every record."""
    logger = logging.getLogger("ccache_action")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def runner_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Environment of a push build on an ubuntu runner."""
    values = {
        "GITHUB_WORKFLOW": "ci",
        "GITHUB_JOB": "build",
        "ImageOS": "ubuntu22",
        "GITHUB_HEAD_REF": "",
        "GITHUB_ACTOR": "octocat",
        "GITHUB_REF": "refs/heads/main",
        "GITHUB_REPOSITORY": "octo/widgets",
    }
    for name, value in values.items():
        monkeypatch.setenv(name, value)
    return values


@pytest.fixture
def build_context() -> BuildContext:
    return BuildContext(
        workflow="ci",
        job="build",
        image_os="ubuntu22",
        actor="octocat",
        ref="refs/heads/main",
        repository="octo/widgets",
    )


@pytest.fixture
def pr_build_context() -> BuildContext:
    return BuildContext(
        workflow="ci",
        job="build",
        image_os="ubuntu22",
        head_ref="feature-x",
        actor="alice",
        ref="refs/pull/7/merge",
        repository="octo/widgets",
    )


class MemoryStateChannel:
    """State channel double recording saved values."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def save_state(self, name: str, value: str) -> None:
        self.values[name] = value

    def get_state(self, name: str) -> str:
        return self.values.get(name, "")


class MemoryCacheStore:
    """Cache store double with immutable entries.

    ``conflicts`` makes the next N stores fail with a reservation
    conflict. ``store_error``, ``list_error`` and ``delete_errors`` inject
    other failures.
    """

    def __init__(self, keys: Sequence[str] = ()) -> None:
        self.entries: dict[str, StoredEntry] = {}
        self.stored_keys: list[str] = []
        self.attempted_keys: list[str] = []
        self.deleted_keys: list[str] = []
        self.fetch_calls: list[tuple[str, list[str]]] = []
        self.conflicts = 0
        self.store_error: Exception | None = None
        self.fetch_error: Exception | None = None
        self.list_error: Exception | None = None
        self.delete_errors: dict[str, Exception] = {}
        for key in keys:
            self.add(key)

    def add(self, key: str) -> None:
        self.entries[key] = StoredEntry(
            key=key,
            created_at=datetime.now(timezone.utc),
            entry_id=len(self.entries) + 1,
        )

    def fetch(self, paths, primary_key, fallback_keys):
        self.fetch_calls.append((primary_key, list(fallback_keys)))
        if self.fetch_error is not None:
            raise self.fetch_error
        if primary_key in self.entries:
            return primary_key
        for fallback_key in fallback_keys:
            if fallback_key in self.entries:
                return fallback_key
            matches = [key for key in self.entries if key.startswith(fallback_key)]
            if matches:
                return matches[-1]
        return None

    def store(self, paths, key):
        self.attempted_keys.append(key)
        if self.store_error is not None:
            raise self.store_error
        if self.conflicts > 0 or key in self.entries:
            self.conflicts = max(self.conflicts - 1, 0)
            raise ReservationConflictError(key)
        self.add(key)
        self.stored_keys.append(key)

    def list_entries(self, key_prefix):
        if self.list_error is not None:
            raise self.list_error
        return [entry for key, entry in self.entries.items() if key.startswith(key_prefix)]

    def delete_entry(self, key):
        if key in self.delete_errors:
            raise self.delete_errors[key]
        entry = self.entries.pop(key, None)
        if entry is None:
            return []
        self.deleted_keys.append(key)
        return [entry]


@pytest.fixture
def state_channel() -> MemoryStateChannel:
    return MemoryStateChannel()


@pytest.fixture
def handoff(state_channel: MemoryStateChannel) -> HandoffSlot:
    return HandoffSlot(state_channel)


@pytest.fixture
def memory_store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """A ccache directory with a couple of object files."""
    directory = tmp_path / "ccache"
    (directory / "a" / "b").mkdir(parents=True)
    (directory / "a" / "b" / "object.o").write_bytes(b"\x7fELF object")
    (directory / "stats").write_text("hits 3\n", encoding="utf-8")
    return directory


class ScriptedRunner:
    """Command runner double.

    ``responses`` maps an argument tuple, or its first element, to the
    CommandResult to return. Unknown commands succeed with empty output.
    """

    def __init__(self, responses: dict | None = None) -> None:
        self.responses: dict = dict(responses or {})
        self.calls: list[list[str]] = []

    def respond(self, args, stdout: str = "", exit_code: int = 0) -> None:
        self.responses[tuple(args)] = CommandResult(tuple(args), exit_code, stdout)

    def run(self, args, *, check: bool = True, silent: bool = False) -> CommandResult:
        args = [str(arg) for arg in args]
        self.calls.append(args)
        result = self.responses.get(tuple(args))
        if result is None:
            result = CommandResult(tuple(args), 0, "")
        return result


@pytest.fixture
def scripted_runner() -> ScriptedRunner:
    return ScriptedRunner()
