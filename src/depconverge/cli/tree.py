"""``depconverge tree <path>`` - Show the converged dependencies of a project.

Converges the project's dependency tree (reading ``deps.lock`` without
modifying it) and prints one row per converged dependency in breadth-first
order, with its source, requirement, environment filter and status.

Exit Codes:
    0 - All dependencies converged.
    1 - One or more dependencies conflict.
    2 - The project manifest or lockfile could not be read.
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
from depconverge.core.dependency import ConvergeOptions, conflicts
from depconverge.exceptions import DepConvergeError


@click.command("tree")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@env_option
@format_option
def tree_command(path: str, env: str | None, output_format: str) -> None:
    """Show the converged dependencies of the project in PATH.

    Exit code 0 when everything converges, 1 on conflicts.
    """
    try:
        loader, converger = open_project(path)
        result = converger.all([], None, ConvergeOptions(env=env), record_visit)
    except DepConvergeError as exc:
        fail(str(exc), output_format)

    messages = conflicts(result.deps)

    if output_format == "json":
        from depconverge.cli.output import dep_to_dict
        click.echo(json.dumps({
            "project": loader.app,
            "env": env,
            "deps": [dep_to_dict(dep) for dep in result.deps],
            "conflicts": messages,
        }, indent=2))
    else:
        from depconverge.cli.output import print_conflicts, print_dependency_table
        print_dependency_table(result.deps, title=f"Dependencies of {loader.app}")
        if messages:
            print_conflicts(messages)

    sys.exit(1 if messages else 0)
