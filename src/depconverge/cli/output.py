"""Rich output formatting helpers for the depconverge CLI.

Status Color Mapping:
    clean / ok = green, overridden = yellow, diverged* = bold red
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from depconverge.core.dependency import Dependency, StatusKind

_STATUS_STYLES: dict[StatusKind, str] = {
    StatusKind.OK: "green",
    StatusKind.OVERRIDDEN: "yellow",
    StatusKind.DIVERGED: "bold red",
    StatusKind.DIVERGED_ONLY: "bold red",
    StatusKind.DIVERGED_REQ: "bold red",
}

console = Console()


def status_text(dep: Dependency) -> Text:
    """Render a node's status as styled text."""
    if dep.status is None:
        return Text("clean", style="green")
    kind = dep.status.kind
    label = kind.value
    if kind is StatusKind.OK and dep.status.version:
        label = f"ok {dep.status.version}"
    return Text(label, style=_STATUS_STYLES.get(kind, "white"))


def dep_to_dict(dep: Dependency) -> dict[str, Any]:
    """JSON-serializable view of a converged node."""
    return {
        "app": dep.app,
        "scm": dep.scm.name if dep.scm else None,
        "source": dep.source,
        "requirement": dep.requirement,
        "manager": dep.manager,
        "only": dep.only,
        "top_level": dep.top_level,
        "status": dep.status.kind.value if dep.status else None,
        "version": dep.version,
        "deps": [child.app for child in dep.deps],
    }


def print_dependency_table(deps: list[Dependency], title: str) -> None:
    """Print one row per converged dependency."""
    if not deps:
        console.print("[dim]No dependencies declared.[/dim]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("App", style="bold")
    table.add_column("Source")
    table.add_column("Requirement", style="dim")
    table.add_column("Only")
    table.add_column("Status", justify="center")
    table.add_column("Children", style="dim")

    for dep in deps:
        table.add_row(
            dep.app,
            dep.source,
            dep.requirement or "-",
            ", ".join(dep.only) if dep.only is not None else "-",
            status_text(dep),
            ", ".join(child.app for child in dep.deps) or "-",
        )
    console.print(table)


def print_conflicts(messages: list[str]) -> None:
    """Print every conflict found during convergence."""
    console.print(
        Panel(
            f"[bold red]{len(messages)} conflicting dependencies[/bold red]",
            title="Dependency Convergence",
        )
    )
    for message in messages:
        console.print(f"[red]* {message}[/red]", highlight=False)


def print_cycles(cycles: list[list[str]]) -> None:
    """Print the cycles that prevent a build order."""
    console.print(
        Panel(
            "[bold red]Could not sort dependencies: cycles detected[/bold red]",
            title="Build Order",
        )
    )
    for cycle in cycles:
        console.print(f"  [red]- {' -> '.join(cycle + cycle[:1])}[/red]", highlight=False)


def print_build_order(deps: list[Dependency]) -> None:
    """Print the topologically sorted build order."""
    if not deps:
        console.print("[dim]Nothing to build.[/dim]")
        return
    table = Table(title="Build Order", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("App", style="bold")
    table.add_column("Source")
    for index, dep in enumerate(deps, start=1):
        table.add_row(str(index), dep.app, dep.source)
    console.print(table)

