"""Shared plumbing for the CLI subcommands."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, NoReturn

import click

from depconverge.core.dependency import Converger, Dependency
from depconverge.core.loader import ManifestLoader
from depconverge.core.lockfile import Lockfile

env_option = click.option(
    "--env", "-e",
    envvar="DEPCONVERGE_ENV",
    default=None,
    help="Target environment; dependencies whose only option excludes it "
    "are skipped (default: $DEPCONVERGE_ENV, else all environments).",
)

format_option = click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)


def record_visit(
    dep: Dependency, acc: list[str], lock: dict[str, Any]
) -> tuple[Dependency, list[str], dict[str, Any]]:
    """Per-node callback: records the apps loaded during convergence."""
    return dep, acc + [dep.app], lock


def open_project(path: str) -> tuple[ManifestLoader, Converger]:
    """Build the loader and converger for the project at *path*.

    The persisted lock is read lazily, only for read-only runs.
    """
    loader = ManifestLoader(Path(path))
    converger = Converger(
        loader, lock_reader=lambda: Lockfile.read(loader.lock_path).as_mapping()
    )
    return loader, converger


def fail(message: str, output_format: str, code: int = 2) -> NoReturn:
    """Report an error in the requested format and exit."""
    if output_format == "json":
        click.echo(json.dumps({"error": message}))
    else:
        click.echo(f"Error: {message}")
    sys.exit(code)
