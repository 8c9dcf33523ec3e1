"""Version requirements used by the default loader.

The converger treats a requirement as an opaque predicate: it only ever asks
the loader whether a requirement accepts a resolved version. This module
provides the predicate the bundled loaders use.

Supported syntax, per comma-separated atom (all atoms must hold):

- Exact / not-equal: ``==1.0.0``, ``!=1.0.0``
- Bounds: ``>=1.0.0``, ``<=2.0.0``, ``>1.0.0``, ``<2.0.0``
- Caret: ``^1.2.0`` (same major; same minor when major is 0)
- Tilde: ``~1.2.0`` (same major.minor)
- Wildcard: ``*``

A bare version (``1.2.3``) is read as ``==1.2.3``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from depconverge.exceptions import InvalidRequirementError

_SEMVER_RE = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<pre>[0-9A-Za-z\-.]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z\-.]+))?$"
)

_ATOM_RE = re.compile(r"^\s*(?P<op>==|!=|>=|<=|>|<|\^|~)?\s*(?P<ver>\S+)\s*$")


def parse_version(version: str) -> tuple[int, int, int]:
    """Parse ``MAJOR.MINOR.PATCH`` into a comparable tuple.

    Pre-release and build metadata are ignored for ordering.

    Raises:
        InvalidRequirementError: If *version* is not a semantic version.
    """
    m = _SEMVER_RE.match(str(version).strip())
    if not m:
        raise InvalidRequirementError(f"Invalid version: {version!r}")
    return int(m.group("major")), int(m.group("minor")), int(m.group("patch"))


@dataclass(frozen=True)
class VersionConstraint:
    """A parsed-on-demand version requirement such as ``>=1.0.0,<2.0.0``."""

    raw: str

    def satisfies(self, version: str) -> bool:
        """Return True when *version* meets every atom of the requirement.

        Raises:
            InvalidRequirementError: If the requirement or the version is
                malformed.
        """
        stripped = self.raw.strip()
        if stripped in ("", "*"):
            return True
        current = parse_version(version)
        atoms = [a for a in stripped.split(",") if a.strip()]
        return all(self._check(atom, current) for atom in atoms)

    def validate(self) -> None:
        """Raise InvalidRequirementError unless every atom parses."""
        stripped = self.raw.strip()
        if stripped in ("", "*"):
            return
        for atom in stripped.split(","):
            if atom.strip():
                self._split(atom)

    @staticmethod
    def _split(atom: str) -> tuple[str, tuple[int, int, int]]:
        m = _ATOM_RE.match(atom)
        if not m:
            raise InvalidRequirementError(f"Invalid requirement: {atom!r}")
        return m.group("op") or "==", parse_version(m.group("ver"))

    @classmethod
    def _check(cls, atom: str, current: tuple[int, int, int]) -> bool:
        op, target = cls._split(atom)
        if op == "==":
            return current == target
        if op == "!=":
            return current != target
        if op == ">=":
            return current >= target
        if op == "<=":
            return current <= target
        if op == ">":
            return current > target
        if op == "<":
            return current < target
        if op == "^":
            if target[0] == 0:
                return current[:2] == target[:2] and current >= target
            return current[0] == target[0] and current >= target
        # "~": patch-level changes only
        return current[:2] == target[:2] and current >= target

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"VersionConstraint({self.raw!r})"
