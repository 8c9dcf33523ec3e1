"""Shared fixtures for CLI tests.

Each fixture lays out a project directory: a root ``deps.yaml`` plus one
``deps/<app>/deps.yaml`` per fetched dependency.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml
from click.testing import CliRunner


def write_manifest(directory: Path, app: str, deps: list[Any], **extra: Any) -> Path:
    """Write ``deps.yaml`` for *app* into *directory*."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "deps.yaml"
    path.write_text(yaml.safe_dump({"app": app, **extra, "deps": deps}), encoding="utf-8")
    return path


def git(app: str, url: str | None = None, **opts: Any) -> dict[str, Any]:
    return {"app": app, "git": url or f"https://example.com/{app}.git", **opts}


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def clean_project(tmp_path: Path) -> Path:
    """demo -> a (tag v1.0.0) -> b; both pinned to versions by their manifests."""
    write_manifest(tmp_path, "demo", [git("a", tag="v1.0.0")])
    write_manifest(tmp_path / "deps" / "a", "a", [git("b")], version="1.0.0")
    write_manifest(tmp_path / "deps" / "b", "b", [], version="0.2.0")
    return tmp_path


@pytest.fixture
def conflicting_project(tmp_path: Path) -> Path:
    """b and c require d from two different repositories."""
    write_manifest(tmp_path, "demo", [git("b"), git("c")])
    write_manifest(tmp_path / "deps" / "b", "b", [git("d", "https://one.example.com/d.git")])
    write_manifest(tmp_path / "deps" / "c", "c", [git("d", "https://two.example.com/d.git")])
    return tmp_path


@pytest.fixture
def cyclic_project(tmp_path: Path) -> Path:
    """x requires y and y requires x."""
    write_manifest(tmp_path, "demo", [git("x")])
    write_manifest(tmp_path / "deps" / "x", "x", [git("y")])
    write_manifest(tmp_path / "deps" / "y", "y", [git("x")])
    return tmp_path


@pytest.fixture
def env_project(tmp_path: Path) -> Path:
    """a is only needed in dev; b is always needed."""
    write_manifest(tmp_path, "demo", [git("a", only=["dev"]), git("b")])
    return tmp_path


@pytest.fixture
def env_conflict_project(tmp_path: Path) -> Path:
    """d overrides as dev-only at the root, but b needs it in every env."""
    write_manifest(tmp_path, "demo", [git("d", override=True, only=["dev"]), git("b")])
    write_manifest(tmp_path / "deps" / "b", "b", [git("d")])
    return tmp_path


@pytest.fixture
def broken_project(tmp_path: Path) -> Path:
    """Root manifest that is not valid YAML."""
    (tmp_path / "deps.yaml").write_text("app: [demo\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def empty_dir(tmp_path: Path) -> Path:
    """Directory without a manifest."""
    return tmp_path
