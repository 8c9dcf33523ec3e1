"""Interface for registry-aware resolution plugged into the converger.

A ``RemoteConverger`` owns the dependencies that are resolved through a
package registry rather than from their local declarations. One
implementation is chosen at startup and passed to
:class:`~depconverge.core.dependency.converger.Converger`; the converger
never probes for one at runtime.

Implementations may block on network access. The converger applies no
timeout or retry policy and lets their exceptions propagate unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from depconverge.core.dependency.models import Dependency


class RemoteConverger(ABC):
    """Registry-side resolution bridge."""

    @abstractmethod
    def remote(self, dep: Dependency) -> bool:
        """Return True when *dep* is resolved by the registry."""

    @abstractmethod
    def deps(self, dep: Dependency, lock: dict[str, Any]) -> list[Dependency]:
        """Return the children of a registry-resolved dependency.

        The lock may be stale; implementations must re-validate the entries
        they read from it.
        """

    @abstractmethod
    def converge(
        self, deps: list[Dependency], lock: dict[str, Any]
    ) -> dict[str, Any]:
        """Resolve the registry-managed subset of *deps*.

        Returns:
            The lock mapping to use from now on; may be a rewritten copy.
        """
