"""Breadth-first convergence of a project's dependency tree.

The tree is walked level by level: every dependency declared by the root is
visited before any of their children, and every child at one depth before
any grandchild. When the same ``app`` is met again deeper in the tree, the
occurrence accepted at the shallower depth is authoritative. This is what
lets a project override the dependencies of its dependencies::

    * project
      1) a
      2) b
        5) d
      3) c
        6) e
        7) f
          8) d
      4) d

Here ``d`` is declared by the project itself (4), so the occurrences under
``b`` (5) and ``f`` (8) converge onto it rather than the other way around.

Each node visit carries two breadth sets:

- ``upper``: apps declared at shallower levels along the visiting path.
  A repeat whose app is in ``upper`` is being overridden from above.
- ``current``: ``upper`` plus the apps declared at the node's own level.
  Optional children are kept only when their app is in ``current``.

A pass returns a fresh arena of nodes keyed by ``app`` (in acceptance order)
together with the caller's accumulator and the lock mapping. Conflicts are
recorded as statuses; the only fatal condition, a cycle, is detected by
:func:`~depconverge.core.dependency.topsort.topsort`.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Any, Callable, NamedTuple, Union

from depconverge.core.dependency.divergence import resolve_divergence
from depconverge.core.dependency.loader import ConvergeOptions, DependencyLoader
from depconverge.core.dependency.models import Dependency
from depconverge.core.dependency.remote import RemoteConverger
from depconverge.core.dependency.topsort import topsort

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Cache outcomes and result type
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Loaded:
    """Cache hit: the node is used as-is, no callback and no loading."""

    dep: Dependency


@dataclass(frozen=True)
class Unloaded:
    """Cache miss: run the callback, then load with the given children."""

    dep: Dependency
    children: list[Dependency] | None = None


CacheOutcome = Union[Loaded, Unloaded]

#: ``callback(dep, acc, lock) -> (dep, acc, lock)``, once per first-seen app.
Callback = Callable[[Dependency, Any, dict], tuple[Dependency, Any, dict]]


class Convergence(NamedTuple):
    """Result of a convergence run: ``(deps, acc, lock)``."""

    deps: list[Dependency]
    acc: Any
    lock: dict[str, Any]

    @property
    def conflicts(self) -> list[Dependency]:
        """Converged nodes carrying a conflict status."""
        return [dep for dep in self.deps if dep.diverged]


@dataclass(frozen=True)
class _Pending:
    dep: Dependency
    upper: frozenset[str]
    current: frozenset[str]


def put_lock(dep: Dependency, lock: dict[str, Any]) -> Dependency:
    """Return *dep* with its lock entry (or None) under ``opts["lock"]``."""
    return replace(dep, opts={**dep.opts, "lock": lock.get(dep.app)})


def reject_unfulfilled_optional(
    children: list[Dependency], breadths: frozenset[str]
) -> list[Dependency]:
    """Drop optional children that nothing above requires."""
    return [
        child for child in children
        if not (child.optional and child.app not in breadths)
    ]


# ---------------------------------------------------------------------------
# Converger
# ---------------------------------------------------------------------------


class Converger:
    """Converges the dependencies of the project described by a loader.

    Args:
        loader: Supplies root declarations, loads nodes, filters by env.
        remote: Optional registry bridge; enables the second pass.
        lock_reader: Returns the persisted lock mapping. Used when a run is
            started without an explicit lock.
    """

    def __init__(
        self,
        loader: DependencyLoader,
        remote: RemoteConverger | None = None,
        lock_reader: Callable[[], dict[str, Any]] | None = None,
    ) -> None:
        self._loader = loader
        self._remote = remote
        self._lock_reader = lock_reader

    def converge(
        self,
        acc: Any,
        lock: dict[str, Any] | None,
        options: ConvergeOptions,
        callback: Callback,
    ) -> Convergence:
        """Converge all dependencies and return them in build order.

        Raises:
            CycleError: If the converged dependencies contain a cycle.
        """
        result = self.all(acc, lock, options, callback)
        return result._replace(deps=topsort(result.deps))

    def all(
        self,
        acc: Any,
        lock: dict[str, Any] | None,
        options: ConvergeOptions,
        callback: Callback,
    ) -> Convergence:
        """Converge all dependencies, in breadth-first acceptance order.

        Passing ``lock=None`` marks the run read-only: the persisted lock is
        read and the remote bridge is never asked to rewrite it.
        """
        loader = self._loader
        remote = self._remote

        roots = [replace(dep, top_level=True) for dep in loader.children()]
        current = frozenset(dep.app for dep in roots)

        # Dependencies filtered out by environment are seeded as already
        # accepted so that conflicts on their ``only`` option still surface.
        main, filtered = loader.partition_by_env(roots, options)

        lock_given = lock is not None
        if lock is None:
            lock = dict(self._lock_reader()) if self._lock_reader else {}

        def local_cache(dep: Dependency) -> CacheOutcome:
            if remote is not None and remote.remote(dep):
                return Loaded(dep)
            return Unloaded(dep)

        logger.debug("Converging %d root dependencies", len(main))
        deps, acc, lock = self._run(
            main, filtered, frozenset(), current, options, callback, acc, lock,
            local_cache,
        )
        deps, _ = loader.partition_by_env(deps, options)

        if remote is None or any(dep.diverged for dep in deps):
            return Convergence(deps, acc, lock)

        if lock_given:
            lock = remote.converge(deps, lock)

        cached = {dep.app: dep for dep in deps if not remote.remote(dep)}
        remote_lock = lock

        def remote_cache(dep: Dependency) -> CacheOutcome:
            hit = cached.get(dep.app)
            if hit is not None:
                return Loaded(replace(hit))
            return Unloaded(dep, remote.deps(dep, remote_lock))

        logger.debug("Re-converging with %d cached local dependencies", len(cached))
        deps, acc, lock = self._run(
            main, [], frozenset(), frozenset(dep.app for dep in main), options,
            callback, acc, lock, remote_cache,
        )
        deps, _ = loader.partition_by_env(deps, options)
        return Convergence(deps, acc, lock)

    # -- Single pass --------------------------------------------------------

    def _run(
        self,
        level: list[Dependency],
        seeds: list[Dependency],
        upper: frozenset[str],
        current: frozenset[str],
        options: ConvergeOptions,
        callback: Callback,
        rest: Any,
        lock: dict[str, Any],
        cache: Callable[[Dependency], CacheOutcome],
    ) -> tuple[list[Dependency], Any, dict[str, Any]]:
        arena: dict[str, Dependency] = {dep.app: dep for dep in seeds}
        unloaded = set(arena)
        queue = deque(_Pending(dep, upper, current) for dep in level)

        while queue:
            pending = queue.popleft()
            dep = pending.dep
            accepted = arena.get(dep.app)

            if accepted is None:
                dep, rest, lock = self._fetch(dep, callback, rest, lock, cache)
                arena[dep.app] = self._schedule(dep, pending, queue)
                continue

            merged = resolve_divergence(
                accepted, dep, dep.app in pending.upper, self._loader.vsn_match
            )
            if merged.diverged and not accepted.diverged:
                logger.debug("Conflict on %s: %s", dep.app, merged.status.kind.value)

            # A seed filtered out by environment may become required through
            # a merge; it is loaded the first time that happens.
            if dep.app in unloaded and not merged.diverged and self._enabled(
                merged, options
            ):
                unloaded.discard(dep.app)
                merged, rest, lock = self._fetch(merged, callback, rest, lock, cache)
                merged = self._schedule(merged, pending, queue)
            arena[dep.app] = merged

        return list(arena.values()), rest, lock

    def _fetch(
        self,
        dep: Dependency,
        callback: Callback,
        rest: Any,
        lock: dict[str, Any],
        cache: Callable[[Dependency], CacheOutcome],
    ) -> tuple[Dependency, Any, dict[str, Any]]:
        outcome = cache(dep)
        if isinstance(outcome, Loaded):
            return outcome.dep, rest, lock
        # The callback may fetch the dependency; load afterwards so the node
        # reflects what is now on disk.
        fetched, rest, lock = callback(put_lock(outcome.dep, lock), rest, lock)
        return self._loader.load(fetched, outcome.children), rest, lock

    @staticmethod
    def _schedule(
        dep: Dependency, pending: _Pending, queue: deque[_Pending]
    ) -> Dependency:
        children = reject_unfulfilled_optional(dep.deps, pending.current)
        child_current = pending.current | {child.app for child in children}
        queue.extend(
            _Pending(child, pending.current, child_current) for child in children
        )
        return replace(dep, deps=children)

    def _enabled(self, dep: Dependency, options: ConvergeOptions) -> bool:
        kept, _ = self._loader.partition_by_env([dep], options)
        return bool(kept)


def converge(
    loader: DependencyLoader,
    acc: Any = None,
    lock: dict[str, Any] | None = None,
    options: ConvergeOptions | None = None,
    callback: Callback | None = None,
    remote: RemoteConverger | None = None,
) -> Convergence:
    """Functional shortcut around :class:`Converger` for one-off runs."""
    if callback is None:
        callback = _identity_callback
    return Converger(loader, remote=remote).converge(
        acc, lock, options or ConvergeOptions(), callback
    )


def _identity_callback(
    dep: Dependency, acc: Any, lock: dict[str, Any]
) -> tuple[Dependency, Any, dict[str, Any]]:
    return dep, acc, lock
