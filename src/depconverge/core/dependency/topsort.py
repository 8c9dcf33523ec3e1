"""Build ordering of converged dependencies.

Children must be built before their parents, so every child ``app`` gets an
edge to its parent's ``app`` and the graph is sorted topologically. Ties are
broken by the converged (breadth-first) position, which keeps the order
stable across runs.
"""

from __future__ import annotations

import networkx as nx

from depconverge.core.dependency.models import Dependency
from depconverge.exceptions import CycleError


def build_graph(deps: list[Dependency]) -> nx.DiGraph:
    """Return the child -> parent graph over the apps in *deps*."""
    graph = nx.DiGraph()
    for dep in deps:
        graph.add_node(dep.app)
    for dep in deps:
        for child in dep.deps:
            graph.add_edge(child.app, dep.app)
    return graph


def topsort(deps: list[Dependency]) -> list[Dependency]:
    """Order *deps* so that every dependency follows its children.

    Returns the node objects from *deps* themselves. Apps that only appear as
    children (e.g. filtered out by environment) are not emitted.

    Raises:
        CycleError: If the dependency graph contains a cycle.
    """
    by_app = {dep.app: dep for dep in deps}
    position = {app: index for index, app in enumerate(by_app)}
    graph = build_graph(deps)

    try:
        apps = list(
            nx.lexicographical_topological_sort(
                graph, key=lambda app: (position.get(app, len(position)), app)
            )
        )
    except nx.NetworkXUnfeasible:
        raise CycleError(
            "Could not sort dependencies. There are cycles in the dependency graph"
        ) from None

    return [by_app[app] for app in apps if app in by_app]


def find_cycles(deps: list[Dependency]) -> list[list[str]]:
    """Enumerate the elementary cycles among *deps* for error reporting.

    Each cycle is listed in dependency direction (``["x", "y"]`` means x
    requires y and y requires x), rotated to start at its smallest app.
    """
    graph = build_graph(deps).reverse(copy=False)
    cycles = []
    for cycle in nx.simple_cycles(graph):
        start = cycle.index(min(cycle))
        cycles.append(cycle[start:] + cycle[:start])
    return sorted(cycles)
