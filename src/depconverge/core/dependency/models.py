"""Dependency nodes and their convergence status.

A ``Dependency`` is one occurrence of a logical dependency (``app``) in the
declared tree. Convergence merges every occurrence of the same ``app`` into a
single authoritative node; when two occurrences cannot be merged the surviving
node carries a conflict ``Status`` that references the other occurrence.

Nodes are handled as values: the divergence resolver and the converger derive
new nodes with :func:`dataclasses.replace` instead of mutating nodes that were
already accepted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from depconverge.core.dependency.scm import Scm


class StatusKind(Enum):
    """Tag of a dependency status."""

    OK = "ok"
    OVERRIDDEN = "overridden"
    DIVERGED = "diverged"
    DIVERGED_ONLY = "diverged_only"
    DIVERGED_REQ = "diverged_req"

    @property
    def is_conflict(self) -> bool:
        return self is not StatusKind.OK


@dataclass(frozen=True)
class Status:
    """Tagged status of a node.

    Attributes:
        kind: The status tag.
        version: Resolved version; conflict statuses keep the version the
            node had before the conflict was recorded.
        other: The conflicting occurrence, for conflict statuses.
    """

    kind: StatusKind
    version: str | None = None
    other: Dependency | None = field(default=None, compare=False)

    @classmethod
    def ok(cls, version: str | None) -> Status:
        return cls(StatusKind.OK, version=version)

    @classmethod
    def conflict(
        cls, kind: StatusKind, other: Dependency, version: str | None = None
    ) -> Status:
        if not kind.is_conflict:
            raise ValueError(f"{kind} is not a conflict status")
        return cls(kind, version=version, other=other)


@dataclass
class Dependency:
    """One declared occurrence of a dependency.

    Attributes:
        app: Logical name; the identity key for convergence.
        requirement: Opaque version requirement, or None for "any".
        scm: Source mechanism, or None when unknown.
        opts: Declaration options (source location, ``only``, ``override``,
            ``optional``, ``env``, ``compile``, ``lock``, ...).
        manager: Build-system hint, possibly unset.
        status: None while clean; otherwise ``OK(version)`` or a conflict.
        top_level: True only for dependencies declared by the root project.
        deps: Child occurrences as declared by this dependency.
        declared_in: Name of the project that declared this occurrence.
    """

    app: str
    requirement: str | None = None
    scm: Scm | None = None
    opts: dict[str, Any] = field(default_factory=dict)
    manager: str | None = None
    status: Status | None = None
    top_level: bool = False
    deps: list[Dependency] = field(default_factory=list)
    declared_in: str | None = None

    @property
    def only(self) -> list[str] | None:
        """Environment filter as a list, or None when unconditional."""
        value = self.opts.get("only")
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    @property
    def optional(self) -> bool:
        return bool(self.opts.get("optional"))

    @property
    def override(self) -> bool:
        return bool(self.opts.get("override"))

    @property
    def version(self) -> str | None:
        """Resolved version recorded in the status, if any."""
        if self.status is None:
            return None
        return self.status.version

    @property
    def diverged(self) -> bool:
        """True when this node carries one of the four conflict statuses."""
        return self.status is not None and self.status.kind.is_conflict

    @property
    def source(self) -> str:
        """Human-readable source location."""
        if self.scm is None:
            return "-"
        return self.scm.format(self.opts)

    def __repr__(self) -> str:
        status = self.status.kind.value if self.status else "clean"
        return f"Dependency({self.app!r}, status={status})"
