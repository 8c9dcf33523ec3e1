"""Builders and in-memory collaborators for convergence tests."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from depconverge.core.dependency import (
    GIT,
    PATH,
    REGISTRY,
    Dependency,
    DependencyLoader,
    RemoteConverger,
    Status,
)


def git_dep(
    app: str,
    url: str | None = None,
    *,
    requirement: str | None = None,
    manager: str | None = None,
    deps: list[Dependency] | None = None,
    **opts: Any,
) -> Dependency:
    """Git dependency; the URL defaults to one derived from the app name."""
    return Dependency(
        app=app,
        requirement=requirement,
        scm=GIT,
        opts={"git": url or f"https://example.com/{app}.git", **opts},
        manager=manager,
        deps=list(deps or []),
    )


def path_dep(app: str, path: str, *, deps: list[Dependency] | None = None, **opts: Any) -> Dependency:
    return Dependency(app=app, scm=PATH, opts={"path": path, **opts}, deps=list(deps or []))


def registry_dep(
    app: str,
    requirement: str | None = None,
    *,
    deps: list[Dependency] | None = None,
    **opts: Any,
) -> Dependency:
    return Dependency(
        app=app,
        requirement=requirement,
        scm=REGISTRY,
        opts={"registry": app, **opts},
        deps=list(deps or []),
    )


class TreeLoader(DependencyLoader):
    """Loader over an in-memory tree.

    The children of each occurrence are the ``deps`` it was declared with.
    ``versions`` maps apps to the version reported once loaded.
    """

    def __init__(
        self, roots: list[Dependency], versions: dict[str, str] | None = None
    ) -> None:
        self.roots = roots
        self.versions = versions or {}
        self.loaded: list[str] = []

    def children(self) -> list[Dependency]:
        return [replace(dep) for dep in self.roots]

    def load(
        self, dep: Dependency, children: list[Dependency] | None = None
    ) -> Dependency:
        self.loaded.append(dep.app)
        if children is None:
            children = list(dep.deps)
        status = dep.status
        if dep.app in self.versions:
            status = Status.ok(self.versions[dep.app])
        return replace(dep, deps=children, status=status)


class FakeRemote(RemoteConverger):
    """Registry bridge backed by dictionaries; records every call."""

    def __init__(
        self,
        children: dict[str, list[Dependency]] | None = None,
        rewritten_lock: dict[str, Any] | None = None,
    ) -> None:
        self.children = children or {}
        self.rewritten_lock = rewritten_lock
        self.converge_calls: list[tuple[list[str], dict[str, Any]]] = []
        self.deps_calls: list[str] = []

    def remote(self, dep: Dependency) -> bool:
        return dep.scm is REGISTRY

    def deps(self, dep: Dependency, lock: dict[str, Any]) -> list[Dependency]:
        self.deps_calls.append(dep.app)
        return [replace(child) for child in self.children.get(dep.app, [])]

    def converge(
        self, deps: list[Dependency], lock: dict[str, Any]
    ) -> dict[str, Any]:
        self.converge_calls.append(([dep.app for dep in deps], dict(lock)))
        if self.rewritten_lock is None:
            return lock
        return dict(self.rewritten_lock)


def identity(dep: Dependency, acc: Any, lock: dict[str, Any]):
    """Callback that changes nothing."""
    return dep, acc, lock


def recording(dep: Dependency, acc: list[str], lock: dict[str, Any]):
    """Callback that appends each visited app to the accumulator."""
    return dep, acc + [dep.app], lock


def by_app(deps: list[Dependency]) -> dict[str, Dependency]:
    return {dep.app: dep for dep in deps}


def apps(deps: list[Dependency]) -> list[str]:
    return [dep.app for dep in deps]
