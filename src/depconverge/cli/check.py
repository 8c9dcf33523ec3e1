"""``depconverge check <path>`` - Verify that a project's dependencies converge.

A read-only check: the persisted ``deps.lock`` is read but never rewritten.
Every conflict is reported in one run; when there are none, the converged
set is sorted to make sure a build order exists.

Exit Codes:
    0 - Dependencies converge and can be ordered.
    1 - One or more dependencies conflict.
    2 - Cycles in the dependency graph, or unreadable manifest/lockfile.
"""

from __future__ import annotations

import json
import sys

import click

from depconverge.cli.common import (
    env_option,
    fail,
    format_option,
    open_project,
    record_visit,
)
from depconverge.core.dependency import (
    ConvergeOptions,
    conflicts,
    find_cycles,
    topsort,
)
from depconverge.exceptions import CycleError, DepConvergeError


@click.command("check")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@env_option
@format_option
def check_command(path: str, env: str | None, output_format: str) -> None:
    """Check that the dependencies of the project in PATH converge.

    Exit code 0 when they do, 1 on conflicts, 2 on cycles.
    """
    try:
        loader, converger = open_project(path)
        result = converger.all([], None, ConvergeOptions(env=env), record_visit)
    except DepConvergeError as exc:
        fail(str(exc), output_format)

    messages = conflicts(result.deps)
    if messages:
        if output_format == "json":
            click.echo(json.dumps({"ok": False, "conflicts": messages}, indent=2))
        else:
            from depconverge.cli.output import print_conflicts
            print_conflicts(messages)
        sys.exit(1)

    try:
        ordered = topsort(result.deps)
    except CycleError as exc:
        cycles = find_cycles(result.deps)
        if output_format == "json":
            click.echo(json.dumps(
                {"ok": False, "error": str(exc), "cycles": cycles}, indent=2
            ))
        else:
            from depconverge.cli.output import print_cycles
            print_cycles(cycles)
        sys.exit(2)

    if output_format == "json":
        click.echo(json.dumps({"ok": True, "deps": len(ordered)}, indent=2))
    else:
        click.echo(f"{len(ordered)} dependencies of {loader.app} converge.")
    sys.exit(0)
