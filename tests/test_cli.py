"""Tests for depwalk.cli."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from depwalk.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def invoke(runner: CliRunner, buckets_dir: Path, *args: str, config: Path | None = None):
    base = ["--buckets-dir", str(buckets_dir)]
    if config is not None:
        base += ["--config", str(config)]
    # Keep the user's own config file out of the way
    env = {"DEPWALK_CONFIG": str(buckets_dir / "none.toml")}
    return runner.invoke(cli, [*base, *args], env=env)


class TestPlan:
    def test_prints_queue_in_order(self, runner: CliRunner, buckets_dir: Path) -> None:
        result = invoke(runner, buckets_dir, "plan", "extras/editor")
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines == [
            "  1. lessmsi 1.10.0 [main] (dependency)",
            "  2. 7zip 23.01 [main] (dependency)",
            "  3. git 2.42.0 [main] (dependency)",
            "  4. editor 1.2 [extras]",
        ]

    def test_installed_helper(self, runner: CliRunner, buckets_dir: Path) -> None:
        result = invoke(runner, buckets_dir, "-i", "7zip", "plan", "git")
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "1. git 2.42.0 [main]"

    def test_external_7zip_config(
        self, runner: CliRunner, buckets_dir: Path, tmp_path: Path
    ) -> None:
        config = tmp_path / "config.toml"
        config.write_text("use_external_7zip = true\n")
        result = invoke(runner, buckets_dir, "plan", "git", config=config)
        assert result.exit_code == 0, result.output
        assert "7zip" not in result.output

    def test_failure_exits_nonzero(self, runner: CliRunner, buckets_dir: Path) -> None:
        result = invoke(runner, buckets_dir, "plan", "ghost", "lessmsi")
        assert result.exit_code == 1
        assert "lessmsi 1.10.0" in result.output
        assert "error: Couldn't find manifest for 'ghost'" in result.output

    def test_explicit_bucket(self, runner: CliRunner, buckets_dir: Path, tmp_path: Path) -> None:
        result = invoke(
            runner,
            tmp_path / "empty",
            "-b",
            f"mine={buckets_dir / 'extras'}",
            "-b",
            f"main={buckets_dir / 'main'}",
            "plan",
            "mine/editor",
        )
        assert result.exit_code == 0, result.output
        assert "editor 1.2 [mine]" in result.output

    def test_bad_bucket_spec(self, runner: CliRunner, buckets_dir: Path) -> None:
        result = invoke(runner, buckets_dir, "-b", "nopath", "plan", "git")
        assert result.exit_code == 2
        assert "NAME=PATH" in result.output

    def test_bad_config(self, runner: CliRunner, buckets_dir: Path, tmp_path: Path) -> None:
        config = tmp_path / "config.toml"
        config.write_text("use_external_7zip = = true\n")
        result = invoke(runner, buckets_dir, "plan", "git", config=config)
        assert result.exit_code == 1
        assert "Invalid TOML" in result.output

    def test_missing_explicit_config(
        self, runner: CliRunner, buckets_dir: Path, tmp_path: Path
    ) -> None:
        result = invoke(runner, buckets_dir, "plan", "git", config=tmp_path / "nope.toml")
        assert result.exit_code == 2
        assert "does not exist" in result.output

    def test_unknown_config_key(
        self, runner: CliRunner, buckets_dir: Path, tmp_path: Path
    ) -> None:
        config = tmp_path / "config.toml"
        config.write_text("use_external_7zipp = true\n")
        result = invoke(runner, buckets_dir, "plan", "git", config=config)
        assert result.exit_code == 1
        assert "use_external_7zipp" in result.output


class TestDeps:
    def test_lists_closure(self, runner: CliRunner, buckets_dir: Path) -> None:
        result = invoke(runner, buckets_dir, "deps", "main/git")
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["lessmsi 1.10.0 [main]", "7zip 23.01 [main]"]

    def test_no_dependencies(self, runner: CliRunner, buckets_dir: Path) -> None:
        result = invoke(runner, buckets_dir, "deps", "lessmsi")
        assert result.exit_code == 0
        assert "lessmsi has no dependencies." in result.output

    def test_missing(self, runner: CliRunner, buckets_dir: Path) -> None:
        result = invoke(runner, buckets_dir, "deps", "ghost")
        assert result.exit_code == 1
        assert "Couldn't find manifest for 'ghost'" in result.output


class TestHelpers:
    def test_lists_helpers(self, runner: CliRunner, buckets_dir: Path) -> None:
        result = invoke(runner, buckets_dir, "helpers", "git")
        assert result.exit_code == 0
        assert result.output.splitlines() == ["7zip"]

    def test_installed_hidden(self, runner: CliRunner, buckets_dir: Path) -> None:
        result = invoke(runner, buckets_dir, "-i", "7zip", "helpers", "git")
        assert result.output == ""

    def test_all(self, runner: CliRunner, buckets_dir: Path) -> None:
        result = invoke(runner, buckets_dir, "-i", "7zip", "helpers", "--all", "git")
        assert result.output.splitlines() == ["7zip"]

    def test_architecture(self, runner: CliRunner, buckets_dir: Path) -> None:
        result = invoke(runner, buckets_dir, "--arch", "32bit", "helpers", "editor")
        assert result.output.splitlines() == ["7zip"]
