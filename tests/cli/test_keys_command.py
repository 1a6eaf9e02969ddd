"""Tests for the keys command."""

from __future__ import annotations

import orjson
import pytest
from typer.testing import CliRunner

from ccache_action.cli.common.context import clear_cli_context
from ccache_action.cli.typer_app import app


@pytest.fixture
def cli_runner():
    clear_cli_context()
    yield CliRunner()
    clear_cli_context()


class TestKeysCommand:
    """Test cases for ``setup-ccache-action keys``."""

    def test_push_build(self, cli_runner, runner_env) -> None:
        result = cli_runner.invoke(app, ["keys"])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == [
            "primary: setup-ccache-action_ci_build_ubuntu22",
            "fallback: setup-ccache-action_ci_build_ubuntu22",
            "fallback: setup-ccache-action_ci_build",
            "fallback: setup-ccache-action_ci",
            "fallback: setup-ccache-action",
        ]

    def test_override_inputs(self, cli_runner, runner_env, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INPUT_OVERRIDE_CACHE_KEY", "custom")
        monkeypatch.setenv("INPUT_OVERRIDE_CACHE_KEY_FALLBACK", "custom-a\ncustom-b")

        result = cli_runner.invoke(app, ["keys"])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == [
            "primary: custom",
            "fallback: custom-a",
            "fallback: custom-b",
        ]

    def test_json_output(self, cli_runner, runner_env, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_HEAD_REF", "feature-x")
        monkeypatch.setenv("GITHUB_ACTOR", "alice")

        result = cli_runner.invoke(app, ["--json", "keys"])

        assert result.exit_code == 0
        document = orjson.loads(result.stdout)
        assert document["success"] is True
        assert document["command"] == "keys"
        assert document["data"]["primary_key"] == "setup-ccache-action_ci_build_ubuntu22_alice-feature-x"
        assert document["data"]["is_default"] is True
        assert len(document["data"]["fallback_keys"]) == 5

    def test_missing_job_identity(self, cli_runner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_ACTIONS", "true")
        monkeypatch.setenv("GITHUB_WORKFLOW", "ci")

        result = cli_runner.invoke(app, ["keys"])

        assert result.exit_code == 1
        assert "::error::Required environment variable 'GITHUB_JOB' is not set" in result.stdout
