"""depconverge CLI - Dependency tree convergence and build ordering.

Entry point for the ``depconverge`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    tree   - Show the converged dependencies of a project.
    check  - Verify that dependencies converge (read-only).
    order  - Print the build order of the converged dependencies.
    lock   - Write deps.lock for reproducible builds.

Usage::

    depconverge tree ./my-project
    depconverge check ./my-project --env prod
    depconverge order ./my-project --format json
    depconverge lock ./my-project
"""

from __future__ import annotations

import click

from depconverge import __version__
from depconverge.cli.check import check_command
from depconverge.cli.lock import lock_command
from depconverge.cli.order import order_command
from depconverge.cli.tree import tree_command


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """depconverge: Converge and order a project's dependency tree.

    Merges every occurrence of each dependency into one authoritative
    node, reports all conflicts at once, and sorts the result into a
    build order.
    """


cli.add_command(tree_command)
cli.add_command(check_command)
cli.add_command(order_command)
cli.add_command(lock_command)
