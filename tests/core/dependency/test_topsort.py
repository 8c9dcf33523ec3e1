"""Tests for build ordering and cycle reporting."""

from __future__ import annotations

import pytest

from depconverge.core.dependency import build_graph, find_cycles, topsort
from depconverge.exceptions import CycleError, ResolutionError
from tests.core.dependency.helpers import apps, git_dep


class TestTopsort:
    """Children are always ordered before their parents."""

    def test_empty(self) -> None:
        assert topsort([]) == []

    def test_independent_nodes_keep_position(self) -> None:
        deps = [git_dep("z"), git_dep("a"), git_dep("m")]
        assert apps(topsort(deps)) == ["z", "a", "m"]

    def test_chain(self) -> None:
        deps = [
            git_dep("a", deps=[git_dep("b")]),
            git_dep("b", deps=[git_dep("c")]),
            git_dep("c"),
        ]
        assert apps(topsort(deps)) == ["c", "b", "a"]

    def test_diamond(self) -> None:
        deps = [
            git_dep("a", deps=[git_dep("b"), git_dep("c")]),
            git_dep("b", deps=[git_dep("d")]),
            git_dep("c", deps=[git_dep("d")]),
            git_dep("d"),
        ]
        assert apps(topsort(deps)) == ["d", "b", "c", "a"]

    def test_returns_same_nodes(self) -> None:
        deps = [git_dep("a", deps=[git_dep("b")]), git_dep("b")]
        ordered = topsort(deps)
        assert ordered[0] is deps[1]
        assert ordered[1] is deps[0]

    def test_children_outside_the_set_are_not_emitted(self) -> None:
        """A child missing from the converged set, e.g. filtered by env."""
        deps = [git_dep("a", deps=[git_dep("ghost")])]
        assert apps(topsort(deps)) == ["a"]

    def test_deterministic(self) -> None:
        deps = [
            git_dep("b", deps=[git_dep("d")]),
            git_dep("a", deps=[git_dep("d")]),
            git_dep("d"),
            git_dep("c"),
        ]
        first = apps(topsort(deps))
        assert all(apps(topsort(deps)) == first for _ in range(5))
        assert first == ["d", "b", "a", "c"]


class TestCycles:
    """Cycles are fatal for ordering and reported explicitly."""

    def test_two_node_cycle(self) -> None:
        deps = [git_dep("x", deps=[git_dep("y")]), git_dep("y", deps=[git_dep("x")])]
        with pytest.raises(CycleError, match="cycles in the dependency graph"):
            topsort(deps)

    def test_cycle_error_is_a_resolution_error(self) -> None:
        deps = [git_dep("x", deps=[git_dep("x")])]
        with pytest.raises(ResolutionError):
            topsort(deps)

    def test_transitive_cycle(self) -> None:
        deps = [
            git_dep("a", deps=[git_dep("b")]),
            git_dep("b", deps=[git_dep("c")]),
            git_dep("c", deps=[git_dep("a")]),
        ]
        with pytest.raises(CycleError):
            topsort(deps)

    def test_find_cycles_direction(self) -> None:
        deps = [
            git_dep("y", deps=[git_dep("x")]),
            git_dep("x", deps=[git_dep("y")]),
            git_dep("z"),
        ]
        assert find_cycles(deps) == [["x", "y"]]

    def test_find_cycles_three_nodes(self) -> None:
        deps = [
            git_dep("c", deps=[git_dep("a")]),
            git_dep("a", deps=[git_dep("b")]),
            git_dep("b", deps=[git_dep("c")]),
        ]
        assert find_cycles(deps) == [["a", "b", "c"]]

    def test_find_cycles_acyclic(self) -> None:
        deps = [git_dep("a", deps=[git_dep("b")]), git_dep("b")]
        assert find_cycles(deps) == []


class TestBuildGraph:

    def test_edges_point_from_child_to_parent(self) -> None:
        graph = build_graph([git_dep("a", deps=[git_dep("b")]), git_dep("b")])
        assert list(graph.edges) == [("b", "a")]
        assert set(graph.nodes) == {"a", "b"}
