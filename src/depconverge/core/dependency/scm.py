"""Source mechanisms a dependency can be fetched from.

Each SCM knows which declaration keys select it, whether two option sets
refer to the same source, and how to pin a resolved node into the lock.
SCM instances are stateless; two instances of the same class compare equal.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from depconverge.core.dependency.models import Dependency


class Scm(ABC):
    """Abstract source mechanism."""

    #: Short identifier written into lock entries and CLI output.
    name: str = ""

    #: Declaration key that selects this SCM (e.g. ``git``).
    key: str = ""

    def accepts(self, opts: dict[str, Any]) -> bool:
        """Return True when *opts* declare this SCM's source key."""
        return opts.get(self.key) not in (None, False)

    @abstractmethod
    def equal(self, opts1: dict[str, Any], opts2: dict[str, Any]) -> bool:
        """Return True when both option sets point at the same source."""

    @abstractmethod
    def format(self, opts: dict[str, Any]) -> str:
        """Human-readable description of the source."""

    def lock_entry(self, dep: Dependency) -> dict[str, Any] | None:
        """Return the pinned reference for *dep*, or None if not lockable."""
        return None

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class GitScm(Scm):
    """Dependencies checked out from a git repository."""

    name = "git"
    key = "git"

    @staticmethod
    def _ref(opts: dict[str, Any]) -> tuple[str, Any] | None:
        for ref_key in ("ref", "branch", "tag"):
            if opts.get(ref_key) is not None:
                return ref_key, opts[ref_key]
        return None

    def equal(self, opts1: dict[str, Any], opts2: dict[str, Any]) -> bool:
        return (
            opts1.get("git") == opts2.get("git")
            and self._ref(opts1) == self._ref(opts2)
        )

    def format(self, opts: dict[str, Any]) -> str:
        ref = self._ref(opts)
        if ref is None:
            return str(opts.get("git"))
        return f"{opts.get('git')} ({ref[0]}: {ref[1]})"

    def lock_entry(self, dep: Dependency) -> dict[str, Any] | None:
        entry: dict[str, Any] = {"scm": self.name, "url": dep.opts.get("git")}
        ref = self._ref(dep.opts)
        if ref is not None:
            entry[ref[0]] = ref[1]
        if dep.version is not None:
            entry["version"] = dep.version
        return entry


class PathScm(Scm):
    """Dependencies that live in a local directory. Never locked."""

    name = "path"
    key = "path"

    def equal(self, opts1: dict[str, Any], opts2: dict[str, Any]) -> bool:
        return os.path.normpath(str(opts1.get("path"))) == os.path.normpath(
            str(opts2.get("path"))
        )

    def format(self, opts: dict[str, Any]) -> str:
        return str(opts.get("path"))


class RegistryScm(Scm):
    """Dependencies published to a package registry.

    The ``registry`` option holds the package name (loaders normalise
    ``registry: true`` to the app name). Version selection is left to the
    requirement and to the remote bridge, so requirements do not take part
    in source equality.
    """

    name = "registry"
    key = "registry"

    @staticmethod
    def package(opts: dict[str, Any]) -> Any:
        return opts.get("registry")

    def equal(self, opts1: dict[str, Any], opts2: dict[str, Any]) -> bool:
        return self.package(opts1) == self.package(opts2) and opts1.get(
            "repo"
        ) == opts2.get("repo")

    def format(self, opts: dict[str, Any]) -> str:
        repo = opts.get("repo")
        package = self.package(opts)
        return f"{repo}/{package}" if repo else f"registry:{package}"

    def lock_entry(self, dep: Dependency) -> dict[str, Any] | None:
        entry: dict[str, Any] = {
            "scm": self.name,
            "package": self.package(dep.opts),
        }
        if dep.opts.get("repo"):
            entry["repo"] = dep.opts["repo"]
        if dep.version is not None:
            entry["version"] = dep.version
        return entry


GIT = GitScm()
PATH = PathScm()
REGISTRY = RegistryScm()

#: Known source mechanisms, in detection order.
SCMS: tuple[Scm, ...] = (GIT, PATH, REGISTRY)


def detect_scms(opts: dict[str, Any]) -> list[Scm]:
    """Return every known SCM whose source key appears in *opts*."""
    return [scm for scm in SCMS if scm.accepts(opts)]
