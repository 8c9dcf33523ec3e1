"""``depconverge order <path>`` - Print the build order of a project's dependencies.

Converges the dependency tree and sorts it topologically so that every
dependency comes after the dependencies it requires.

Exit Codes:
    0 - Build order printed.
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


@click.command("order")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@env_option
@format_option
def order_command(path: str, env: str | None, output_format: str) -> None:
    """Print the order in which the dependencies of PATH must be built.

    Exit code 0 on success, 1 on conflicts, 2 on cycles.
    """
    try:
        loader, converger = open_project(path)
        result = converger.all([], None, ConvergeOptions(env=env), record_visit)
    except DepConvergeError as exc:
        fail(str(exc), output_format)

    messages = conflicts(result.deps)
    if messages:
        if output_format == "json":
            click.echo(json.dumps({"conflicts": messages}, indent=2))
        else:
            from depconverge.cli.output import print_conflicts
            print_conflicts(messages)
        sys.exit(1)

    try:
        ordered = topsort(result.deps)
    except CycleError as exc:
        cycles = find_cycles(result.deps)
        if output_format == "json":
            click.echo(json.dumps({"error": str(exc), "cycles": cycles}, indent=2))
        else:
            from depconverge.cli.output import print_cycles
            print_cycles(cycles)
        sys.exit(2)

    if output_format == "json":
        click.echo(json.dumps({
            "project": loader.app,
            "order": [dep.app for dep in ordered],
        }, indent=2))
    else:
        from depconverge.cli.output import print_build_order
        print_build_order(ordered)
    sys.exit(0)
