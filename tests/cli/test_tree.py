"""Tests for ``depconverge tree`` command.

Verifies:
    - Converged dependencies are listed in breadth-first order.
    - JSON output carries status, version and children per dependency.
    - Conflicts are reported with exit code 1.
    - ``--env`` and ``DEPCONVERGE_ENV`` filter dependencies.
    - The persisted lock is read but not rewritten.
"""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from depconverge.cli.main import cli


class TestTreeText:
    """Rich table output."""

    def test_clean_project(self, runner: CliRunner, clean_project: Path) -> None:
        result = runner.invoke(cli, ["tree", str(clean_project)])
        assert result.exit_code == 0
        assert "Dependencies of demo" in result.output
        assert "conflicting" not in result.output

    def test_conflicts_exit_1(self, runner: CliRunner, conflicting_project: Path) -> None:
        result = runner.invoke(cli, ["tree", str(conflicting_project)])
        assert result.exit_code == 1
        assert "1 conflicting dependencies" in result.output
        assert "Different specs were given for d" in result.output

    def test_empty_project(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "deps.yaml").write_text("app: demo\n", encoding="utf-8")
        result = runner.invoke(cli, ["tree", str(tmp_path)])
        assert result.exit_code == 0
        assert "No dependencies declared" in result.output


class TestTreeJson:
    """Machine-readable output."""

    def test_deps_in_breadth_first_order(
        self, runner: CliRunner, clean_project: Path
    ) -> None:
        result = runner.invoke(cli, ["tree", str(clean_project), "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["project"] == "demo"
        assert [dep["app"] for dep in data["deps"]] == ["a", "b"]
        assert data["conflicts"] == []

    def test_dependency_fields(self, runner: CliRunner, clean_project: Path) -> None:
        result = runner.invoke(cli, ["tree", str(clean_project), "--format", "json"])
        a = json.loads(result.output)["deps"][0]
        assert a["scm"] == "git"
        assert a["status"] == "ok"
        assert a["version"] == "1.0.0"
        assert a["top_level"] is True
        assert a["deps"] == ["b"]
        assert a["source"] == "https://example.com/a.git (tag: v1.0.0)"

    def test_conflict_status(self, runner: CliRunner, conflicting_project: Path) -> None:
        result = runner.invoke(
            cli, ["tree", str(conflicting_project), "--format", "json"]
        )
        assert result.exit_code == 1
        data = json.loads(result.output)
        d = next(dep for dep in data["deps"] if dep["app"] == "d")
        assert d["status"] == "diverged"
        assert len(data["conflicts"]) == 1


class TestTreeEnv:
    """Environment filtering."""

    def test_env_option(self, runner: CliRunner, env_project: Path) -> None:
        result = runner.invoke(
            cli, ["tree", str(env_project), "--env", "prod", "--format", "json"]
        )
        data = json.loads(result.output)
        assert data["env"] == "prod"
        assert [dep["app"] for dep in data["deps"]] == ["b"]

    def test_env_variable(self, runner: CliRunner, env_project: Path) -> None:
        result = runner.invoke(
            cli,
            ["tree", str(env_project), "--format", "json"],
            env={"DEPCONVERGE_ENV": "dev"},
        )
        data = json.loads(result.output)
        assert [dep["app"] for dep in data["deps"]] == ["a", "b"]

    def test_no_env_keeps_all(self, runner: CliRunner, env_project: Path) -> None:
        result = runner.invoke(
            cli, ["tree", str(env_project), "--format", "json"], env={"DEPCONVERGE_ENV": None}
        )
        data = json.loads(result.output)
        assert data["env"] is None
        assert [dep["only"] for dep in data["deps"]] == [["dev"], None]


class TestTreeLock:
    """The persisted lock feeds versions without being rewritten."""

    def test_locked_version_is_shown(self, runner: CliRunner, env_project: Path) -> None:
        lock_text = json.dumps({"deps": {"b": {"scm": "git", "version": "3.0.0"}}})
        (env_project / "deps.lock").write_text(lock_text, encoding="utf-8")
        result = runner.invoke(
            cli, ["tree", str(env_project), "--format", "json"], env={"DEPCONVERGE_ENV": None}
        )
        b = json.loads(result.output)["deps"][1]
        assert b["version"] == "3.0.0"
        assert (env_project / "deps.lock").read_text(encoding="utf-8") == lock_text
