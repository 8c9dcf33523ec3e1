"""Reference loader reading YAML ``deps.yaml`` manifests.

A project directory holds a ``deps.yaml`` manifest::

    app: demo
    version: 0.1.0
    deps_path: deps          # where fetched dependencies live
    deps:
      - app: plug
        requirement: ">=1.0.0"
        git: https://example.com/plug.git
        tag: v1.2.0
        only: [dev, test]
      - app: local_utils
        path: ../local_utils
      - app: jason
        registry: true
        optional: true

Each dependency is looked up in ``<deps_path>/<app>`` (or its ``path`` for
path dependencies). When that directory carries its own ``deps.yaml`` the
manifest provides the dependency's version, manager and children.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

import yaml

from depconverge.core.dependency.constraints import VersionConstraint
from depconverge.core.dependency.loader import DependencyLoader
from depconverge.core.dependency.models import Dependency, Status
from depconverge.core.dependency.scm import PATH, REGISTRY, detect_scms
from depconverge.exceptions import InvalidRequirementError, ManifestError

logger = logging.getLogger(__name__)

MANIFEST_NAME = "deps.yaml"
DEFAULT_DEPS_PATH = "deps"

# Keys that are fields of the node rather than options.
_FIELD_KEYS = ("app", "requirement", "manager")


def read_manifest(path: Path) -> dict[str, Any]:
    """Parse a manifest file.

    Raises:
        ManifestError: If the file is unreadable, not YAML, or not a mapping
            with an ``app`` name and a list of ``deps``.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"Could not read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ManifestError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ManifestError(f"{path} must contain a mapping")
    if not isinstance(data.get("app"), str) or not data["app"]:
        raise ManifestError(f"{path} does not declare an app name")
    if not isinstance(data.get("deps", []), list):
        raise ManifestError(f"deps in {path} must be a list")
    return data


def parse_declaration(
    entry: Any, base_dir: Path, declared_in: str | None = None
) -> Dependency:
    """Turn one ``deps`` entry into a ``Dependency`` node.

    A bare string is shorthand for a registry dependency of that name.

    Args:
        entry: The raw YAML entry.
        base_dir: Directory that relative ``path`` options resolve against.
        declared_in: App name of the declaring project (None for the root).

    Raises:
        ManifestError: For malformed declarations.
    """
    if isinstance(entry, str):
        entry = {"app": entry, "registry": True}
    if not isinstance(entry, dict):
        raise ManifestError(f"Invalid dependency declaration: {entry!r}")

    app = entry.get("app")
    if not isinstance(app, str) or not app:
        raise ManifestError(f"Dependency declaration without app: {entry!r}")

    requirement = entry.get("requirement")
    if requirement is not None:
        requirement = str(requirement)
        try:
            VersionConstraint(requirement).validate()
        except InvalidRequirementError as exc:
            raise ManifestError(f"Dependency {app}: {exc}") from exc

    opts = {k: v for k, v in entry.items() if k not in _FIELD_KEYS}
    scms = detect_scms(opts)
    if len(scms) != 1:
        raise ManifestError(
            f"Dependency {app} must declare exactly one of git, path or registry"
        )
    scm = scms[0]

    if scm is REGISTRY and opts["registry"] is True:
        opts["registry"] = app
    if scm is PATH:
        opts["path"] = str((base_dir / str(opts["path"])).resolve())
    if isinstance(opts.get("only"), str):
        opts["only"] = [opts["only"]]

    return Dependency(
        app=app,
        requirement=requirement,
        scm=scm,
        opts=opts,
        manager=entry.get("manager"),
        declared_in=declared_in,
    )


class ManifestLoader(DependencyLoader):
    """Loads dependency nodes from ``deps.yaml`` manifests on disk.

    Args:
        project_dir: Directory containing the root ``deps.yaml``.

    Raises:
        ManifestError: If the root manifest is missing or malformed.
    """

    def __init__(self, project_dir: Path) -> None:
        self._root = Path(project_dir).resolve()
        self._manifest = read_manifest(self._root / MANIFEST_NAME)
        self._deps_path = self._root / str(
            self._manifest.get("deps_path", DEFAULT_DEPS_PATH)
        )

    @property
    def project_dir(self) -> Path:
        return self._root

    @property
    def app(self) -> str:
        """Name of the root project."""
        return self._manifest["app"]

    @property
    def lock_path(self) -> Path:
        """Default lockfile location for this project."""
        return self._root / "deps.lock"

    def children(self) -> list[Dependency]:
        return [
            parse_declaration(entry, self._root)
            for entry in self._manifest.get("deps", [])
        ]

    def dep_dir(self, dep: Dependency) -> Path:
        """Directory where *dep* is (or would be) available."""
        if dep.scm is PATH:
            return Path(dep.opts["path"])
        return self._deps_path / dep.app

    def load(
        self, dep: Dependency, children: list[Dependency] | None = None
    ) -> Dependency:
        directory = self.dep_dir(dep)
        manifest_file = directory / MANIFEST_NAME
        manifest: dict[str, Any] = {}

        if manifest_file.is_file():
            manifest = read_manifest(manifest_file)
        else:
            logger.debug("No manifest for %s at %s", dep.app, directory)

        if children is None:
            children = [
                parse_declaration(entry, directory, declared_in=dep.app)
                for entry in manifest.get("deps", [])
            ]

        version = manifest.get("version")
        if version is None:
            version = _locked_version(dep)

        status = dep.status
        if version is not None:
            status = Status.ok(str(version))

        return replace(
            dep,
            deps=list(children),
            status=status,
            manager=dep.manager or manifest.get("manager"),
        )


def _locked_version(dep: Dependency) -> str | None:
    entry = dep.opts.get("lock")
    if isinstance(entry, dict):
        return entry.get("version")
    return None
