"""Persisted lock mapping --- ``deps.lock``.

The lock maps each ``app`` to an opaque pinned reference (for the bundled
SCMs a small dict such as ``{"scm": "git", "url": ..., "tag": ...}``). The
converger only ever sees it as a plain ``dict``; this module reads and writes
it.

Determinism guarantee: ``to_json()`` sorts apps and keys, so two lockfiles
with the same entries always serialize byte-identically.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from depconverge import _PRODUCT_ID
from depconverge.core.dependency.models import Dependency
from depconverge.exceptions import LockfileError


class Lockfile:
    """The pinned references for a project's dependencies.

    Example::

        lf = Lockfile.read(Path("deps.lock"))
        result = converger.converge(None, lf.as_mapping(), options, callback)
        Lockfile.from_deps(result.deps).write(Path("deps.lock"))
    """

    LOCKFILE_VERSION: str = "1.0"

    def __init__(self, entries: dict[str, Any] | None = None) -> None:
        self._entries: dict[str, Any] = dict(entries or {})

    # -- Entries ------------------------------------------------------------

    def get(self, app: str) -> Any:
        return self._entries.get(app)

    def set(self, app: str, entry: Any) -> None:
        self._entries[app] = entry

    @property
    def apps(self) -> list[str]:
        """Sorted app names with a lock entry."""
        return sorted(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, app: object) -> bool:
        return app in self._entries

    def as_mapping(self) -> dict[str, Any]:
        """Return a copy of the entries, as consumed by the converger."""
        return dict(self._entries)

    # -- Construction -------------------------------------------------------

    @classmethod
    def from_deps(cls, deps: list[Dependency]) -> Lockfile:
        """Pin every lockable node in *deps* through its SCM."""
        lf = cls()
        for dep in deps:
            if dep.scm is None:
                continue
            entry = dep.scm.lock_entry(dep)
            if entry is not None:
                lf.set(dep.app, entry)
        return lf

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Lockfile:
        """Build a lockfile from the structure produced by ``to_dict``.

        Raises:
            LockfileError: If ``deps`` is not a mapping.
        """
        entries = data.get("deps", {})
        if not isinstance(entries, dict):
            raise LockfileError("Lockfile 'deps' section must be a mapping")
        return cls(entries)

    @classmethod
    def from_json(cls, json_str: str) -> Lockfile:
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as exc:
            raise LockfileError(f"Corrupt lockfile: {exc}") from exc
        if not isinstance(data, dict):
            raise LockfileError("Lockfile must contain a JSON object")
        return cls.from_dict(data)

    @classmethod
    def read(cls, path: Path) -> Lockfile:
        """Read *path*; a missing file yields an empty lockfile.

        Raises:
            LockfileError: If the file exists but cannot be parsed.
        """
        if not path.is_file():
            return cls()
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise LockfileError(f"Could not read {path}: {exc}") from exc
        return cls.from_json(text)

    # -- Serialization ------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "lock_version": self.LOCKFILE_VERSION,
            "generated_by": _PRODUCT_ID,
            "deps": {app: self._entries[app] for app in self.apps},
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True) + "\n"

    def write(self, path: Path) -> None:
        """Write the lockfile, creating parent directories as needed.

        Raises:
            LockfileError: If the file cannot be written.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.to_json(), encoding="utf-8")
        except OSError as exc:
            raise LockfileError(f"Could not write {path}: {exc}") from exc
