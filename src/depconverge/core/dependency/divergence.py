"""Divergence resolution between two occurrences of the same dependency.

When the converger meets an ``app`` it has already accepted, the accepted
node and the incoming occurrence must converge. The outcome is decided in
order:

1. The accepted node sits in the upper breadth (it was declared at a
   shallower level than the incoming one) and carries ``override``: it wins
   outright. Only the environment filter is checked.
2. Both occurrences are compatible (same SCM, compatible managers, equal
   ``app``/``env``/``compile`` options, same source): they merge. The
   environment filters merge, the version requirement is re-checked against
   the accepted version, and a missing manager is adopted.
3. Otherwise the accepted node is marked ``OVERRIDDEN`` (upper breadth) or
   ``DIVERGED`` and keeps a reference to the incoming occurrence.

Conflicts are returned as data, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from depconverge.core.dependency.models import Dependency, Status, StatusKind
from depconverge.exceptions import InvalidRequirementError

logger = logging.getLogger(__name__)

#: ``vsn_match(requirement, version, app) -> bool``
VersionMatcher = Callable[[str | None, str, str], bool]

# Options that must be identical for two occurrences to converge.
_CONVERGE_OPTS = ("app", "env", "compile")


def manager_equal(manager1: str | None, manager2: str | None) -> bool:
    """Managers match when equal or when either side is unset."""
    return manager1 is None or manager2 is None or manager1 == manager2


def opts_equal(opts1: dict, opts2: dict) -> bool:
    """Compare the option subset that affects how a dependency is built."""
    missing = object()
    return all(
        opts1.get(key, missing) == opts2.get(key, missing)
        for key in _CONVERGE_OPTS
    )


def converges(dep1: Dependency, dep2: Dependency) -> bool:
    """Return True when two occurrences describe the same source and build."""
    return (
        dep1.scm is not None
        and dep1.scm == dep2.scm
        and manager_equal(dep1.manager, dep2.manager)
        and opts_equal(dep1.opts, dep2.opts)
        and dep1.scm.equal(dep1.opts, dep2.opts)
    )


def resolve_divergence(
    accepted: Dependency,
    incoming: Dependency,
    in_upper: bool,
    vsn_match: VersionMatcher,
) -> Dependency:
    """Merge *incoming* into *accepted* and return the surviving node.

    Args:
        accepted: The node already accepted for this ``app``.
        incoming: The newly encountered occurrence.
        in_upper: Whether ``app`` belongs to the upper breadth of the
            incoming occurrence, i.e. was declared at a shallower level.
        vsn_match: Requirement predicate supplied by the loader.

    Returns:
        A new node; *accepted* is left untouched.
    """
    if in_upper and accepted.override:
        return with_matching_only(accepted, incoming, authoritative=True)

    if converges(accepted, incoming):
        merged = with_matching_only(accepted, incoming, authoritative=False)
        merged = with_matching_req(merged, incoming, vsn_match)
        return merge_manager(merged, incoming)

    kind = StatusKind.OVERRIDDEN if in_upper else StatusKind.DIVERGED
    logger.debug(
        "%s %s: %s vs %s", accepted.app, kind.value, accepted.source, incoming.source
    )
    status = Status.conflict(kind, incoming, accepted.version)
    return replace(accepted, status=status)


def with_matching_only(
    accepted: Dependency, incoming: Dependency, authoritative: bool
) -> Dependency:
    """Merge the ``only`` environment filters of two occurrences.

    An optional incoming occurrence never changes the accepted filter.

    Authoritative (the accepted node overrides from a shallower level): the
    incoming filter must be covered by the accepted one, otherwise the node
    is marked ``DIVERGED_ONLY``. An incoming occurrence without a filter
    needs every environment.

    Otherwise neither occurrence is authoritative over the other, so the
    filters are unioned. A side without a filter makes the dependency
    unconditional.
    """
    if incoming.optional:
        return accepted

    accepted_only = accepted.only
    incoming_only = incoming.only

    if authoritative:
        if accepted_only is None:
            return accepted
        if incoming_only is not None and set(incoming_only) <= set(accepted_only):
            return accepted
        status = Status.conflict(
            StatusKind.DIVERGED_ONLY, incoming, accepted.version
        )
        return replace(accepted, status=status)

    opts = dict(accepted.opts)
    if accepted_only is not None and incoming_only is not None:
        opts["only"] = list(dict.fromkeys(accepted_only + incoming_only))
    else:
        opts.pop("only", None)
    return replace(accepted, opts=opts)


def with_matching_req(
    accepted: Dependency, incoming: Dependency, vsn_match: VersionMatcher
) -> Dependency:
    """Mark ``DIVERGED_REQ`` when the accepted version fails the new requirement."""
    status = accepted.status
    if status is None or status.kind is not StatusKind.OK or status.version is None:
        return accepted
    version = status.version
    try:
        matched = vsn_match(incoming.requirement, version, incoming.app)
    except InvalidRequirementError:
        logger.debug("Invalid requirement %r for %s", incoming.requirement, incoming.app)
        matched = False
    if matched:
        return accepted
    return replace(
        accepted, status=Status.conflict(StatusKind.DIVERGED_REQ, incoming, version)
    )


def merge_manager(accepted: Dependency, incoming: Dependency) -> Dependency:
    """Adopt the incoming manager when the accepted node has none."""
    if accepted.manager is not None or incoming.manager is None:
        return accepted
    return replace(accepted, manager=incoming.manager)
