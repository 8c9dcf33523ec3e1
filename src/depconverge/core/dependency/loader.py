"""Loader interface consumed by the converger.

A loader turns declarations into ``Dependency`` nodes. Concrete loaders
implement ``children`` and ``load``; environment partitioning and the
requirement predicate have default implementations that most loaders reuse.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from depconverge.core.dependency.constraints import VersionConstraint
from depconverge.core.dependency.models import Dependency


@dataclass(frozen=True)
class ConvergeOptions:
    """Options that shape a convergence run.

    Attributes:
        env: Target environment (e.g. ``"prod"``). None keeps every
            dependency regardless of its ``only`` filter.
    """

    env: str | None = None


class DependencyLoader(ABC):
    """Produces dependency nodes for the converger."""

    @abstractmethod
    def children(self) -> list[Dependency]:
        """Return the dependencies declared by the root project."""

    @abstractmethod
    def load(
        self, dep: Dependency, children: list[Dependency] | None = None
    ) -> Dependency:
        """Finalize *dep* once it is available.

        Args:
            dep: The node returned by the per-node callback.
            children: Pre-computed children (e.g. from a registry). When
                None the loader discovers them itself.

        Returns:
            A node carrying its status and declared children.
        """

    def partition_by_env(
        self, deps: list[Dependency], options: ConvergeOptions
    ) -> tuple[list[Dependency], list[Dependency]]:
        """Split *deps* into those enabled for ``options.env`` and the rest.

        Nodes carrying a conflict status are always kept so the conflict is
        reported whatever the target environment.
        """
        kept: list[Dependency] = []
        filtered: list[Dependency] = []
        for dep in deps:
            only = dep.only
            if (
                options.env is None
                or only is None
                or options.env in only
                or dep.diverged
            ):
                kept.append(dep)
            else:
                filtered.append(dep)
        return kept, filtered

    def vsn_match(self, requirement: str | None, version: str, app: str) -> bool:
        """Return True when *version* satisfies *requirement*.

        Raises:
            InvalidRequirementError: If either side cannot be parsed.
        """
        if requirement is None:
            return True
        return VersionConstraint(requirement).satisfies(version)
