"""``depconverge lock <path>`` - Write deps.lock for reproducible builds.

Converges the project's dependencies with the current ``deps.lock`` given
explicitly (so a configured registry bridge may rewrite it), orders them,
and pins every lockable dependency into a deterministic ``deps.lock``.

Exit Codes:
    0 - Lockfile written.
    1 - One or more dependencies conflict; nothing is written.
    2 - Cycles in the dependency graph, or unreadable manifest/lockfile.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from depconverge.cli.common import env_option, fail, open_project, record_visit
from depconverge.core.dependency import ConvergeOptions, conflicts
from depconverge.core.lockfile import Lockfile
from depconverge.exceptions import DepConvergeError


@click.command("lock")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@env_option
@click.option(
    "--output", "-o",
    type=click.Path(),
    default=None,
    help="Output path for the lockfile (default: <path>/deps.lock).",
)
def lock_command(path: str, env: str | None, output: str | None) -> None:
    """Generate deps.lock for the project in PATH.

    Exit code 0 on success, 1 on conflicts, 2 on cycles or read errors.
    """
    try:
        loader, converger = open_project(path)
        current = Lockfile.read(loader.lock_path)
        result = converger.converge(
            [], current.as_mapping(), ConvergeOptions(env=env), record_visit
        )
    except DepConvergeError as exc:
        fail(str(exc), "text")

    messages = conflicts(result.deps)
    if messages:
        from depconverge.cli.output import print_conflicts
        print_conflicts(messages)
        sys.exit(1)

    lockfile = Lockfile.from_deps(result.deps)
    out_path = Path(output) if output else loader.lock_path
    try:
        lockfile.write(out_path)
    except DepConvergeError as exc:
        fail(str(exc), "text")

    from depconverge.cli.output import print_build_order
    print_build_order(result.deps)
    click.echo(f"\nLocked {len(lockfile)} dependencies.")
    click.echo(f"Lockfile written to: {out_path}")
    sys.exit(0)
