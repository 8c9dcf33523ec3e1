"""Dependency convergence engine.

Public names are re-exported here, so callers can write
``from depconverge.core.dependency import Converger``.

Pipeline
--------
1. A loader yields the root declarations and loads each node.
2. ``Converger`` walks the tree breadth-first, merging repeated apps with
   the divergence resolver and recording conflicts as statuses.
3. An optional ``RemoteConverger`` re-runs convergence with registry-aware
   child expansion and may rewrite the lock mapping.
4. ``topsort`` orders the converged nodes children-first, or raises
   ``CycleError``.
"""

from depconverge.core.dependency.constraints import VersionConstraint, parse_version
from depconverge.core.dependency.converger import (
    Convergence,
    Converger,
    Loaded,
    Unloaded,
    converge,
    put_lock,
    reject_unfulfilled_optional,
)
from depconverge.core.dependency.divergence import (
    converges,
    manager_equal,
    opts_equal,
    resolve_divergence,
)
from depconverge.core.dependency.loader import ConvergeOptions, DependencyLoader
from depconverge.core.dependency.messages import conflicts, describe
from depconverge.core.dependency.models import Dependency, Status, StatusKind
from depconverge.core.dependency.remote import RemoteConverger
from depconverge.core.dependency.scm import (
    GIT,
    PATH,
    REGISTRY,
    SCMS,
    GitScm,
    PathScm,
    RegistryScm,
    Scm,
    detect_scms,
)
from depconverge.core.dependency.topsort import build_graph, find_cycles, topsort

__all__ = [
    "ConvergeOptions",
    "Convergence",
    "Converger",
    "Dependency",
    "DependencyLoader",
    "GIT",
    "GitScm",
    "Loaded",
    "PATH",
    "PathScm",
    "REGISTRY",
    "RegistryScm",
    "RemoteConverger",
    "SCMS",
    "Scm",
    "Status",
    "StatusKind",
    "Unloaded",
    "VersionConstraint",
    "build_graph",
    "conflicts",
    "converge",
    "converges",
    "describe",
    "detect_scms",
    "find_cycles",
    "manager_equal",
    "opts_equal",
    "parse_version",
    "put_lock",
    "reject_unfulfilled_optional",
    "resolve_divergence",
    "topsort",
]
