"""Tests for the pre-build phase."""

from __future__ import annotations

from pathlib import Path

from ccache_action.cli.main_handler import handle_main_command, run_main_phase
from ccache_action.services.cache_store import LocalCacheStore
from ccache_action.shared.constants import StateNames

CCACHE = "/usr/bin/ccache"
PREFIX = "setup-ccache-action_ci_build_ubuntu22"


def read_runner_file(workflow, variable: str) -> str:
    return Path(workflow.environ[variable]).read_text(encoding="utf-8")


class TestRunMainPhase:
    """Test cases for run_main_phase."""

    def test_cold_cache(self, make_runtime, scripted_runner, workflow) -> None:
        runtime = make_runtime(ccache_options="max_size=500M\ncompression=true")

        run_main_phase(runtime)

        assert "cache_hit<<" in read_runner_file(workflow, "GITHUB_OUTPUT")
        assert "\nfalse\n" in read_runner_file(workflow, "GITHUB_OUTPUT")
        assert [CCACHE, "--set-config", "max_size=500M"] in scripted_runner.calls
        assert [CCACHE, "--set-config", "compression=true"] in scripted_runner.calls
        assert scripted_runner.calls[-1] == [CCACHE, "--zero-stats"]
        assert workflow.environ["PATH"].startswith("/usr/lib/ccache")
        assert workflow.environ["ccache_symlinks_path"] == "/usr/lib/ccache"
        assert StateNames.FOUND_CACHE_KEY not in read_runner_file(workflow, "GITHUB_STATE")

    def test_restores_previous_entry(self, make_runtime, workflow, cache_dir, tmp_path: Path) -> None:
        runtime = make_runtime()
        LocalCacheStore(tmp_path / "store").store([cache_dir], f"{PREFIX}_100")
        (cache_dir / "stats").unlink()

        run_main_phase(runtime)

        assert "\ntrue\n" in read_runner_file(workflow, "GITHUB_OUTPUT")
        assert (cache_dir / "stats").exists()
        state = read_runner_file(workflow, "GITHUB_STATE")
        assert StateNames.FOUND_CACHE_KEY in state
        assert f"{PREFIX}_100" in state

    def test_unreachable_cache_service_is_a_miss(
        self, make_runtime, scripted_runner, workflow, caplog
    ) -> None:
        runtime = make_runtime()
        runtime.store_dir = None

        run_main_phase(runtime)

        assert "\nfalse\n" in read_runner_file(workflow, "GITHUB_OUTPUT")
        warnings = [record for record in caplog.records if record.levelname == "WARNING"]
        assert any("ACTIONS_RESULTS_URL" in record.getMessage() for record in warnings)
        assert scripted_runner.calls[-1] == [CCACHE, "--zero-stats"]
        assert workflow.environ["ccache_symlinks_path"] == "/usr/lib/ccache"

    def test_steps_are_grouped(self, make_runtime, workflow) -> None:
        run_main_phase(make_runtime())

        groups = [
            line.removeprefix("::group::")
            for line in workflow.stream.getvalue().splitlines()
            if line.startswith("::group::")
        ]
        assert groups == [
            "Check ccache availability",
            "Restore cache",
            'Set output variable: cache_hit="false"',
            "Configure ccache",
            "Clear ccache statistics",
            "Prepend ccache symlinks path to $PATH",
            "Create environment variables",
        ]

    def test_disabled_steps(self, make_runtime, workflow, caplog) -> None:
        caplog.set_level("INFO", logger="ccache_action")
        runtime = make_runtime(restore_cache="false", prepend_symlinks_to_path="false")

        run_main_phase(runtime)

        assert "Skip restore cache..." in caplog.text
        assert "Skip prepend ccache symlinks path to $PATH..." in caplog.text
        assert workflow.environ["PATH"] == "/usr/bin"
        # the variable is exported either way
        assert workflow.environ["ccache_symlinks_path"] == "/usr/lib/ccache"

    def test_removes_stale_config_file(self, make_runtime, tmp_path: Path) -> None:
        config = tmp_path / "home" / ".ccache" / "ccache.conf"
        config.parent.mkdir(parents=True)
        config.write_text("max_size = 1G\n", encoding="utf-8")

        run_main_phase(make_runtime())

        assert not config.exists()


class TestHandleMainCommand:
    """Test cases for handle_main_command."""

    def test_unsupported_platform_is_a_no_op(self, mocker, caplog) -> None:
        mocker.patch("ccache_action.cli.runtime.resolve_platform", return_value=None)
        run_phase = mocker.patch("ccache_action.cli.main_handler.run_main_phase")

        assert handle_main_command() == 0

        run_phase.assert_not_called()
        assert "No operation..." in caplog.text
