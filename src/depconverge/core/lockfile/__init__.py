"""Dependency lockfile (``deps.lock``) --- the persisted lock mapping."""

from depconverge.core.lockfile.lockfile import Lockfile

__all__ = ["Lockfile"]
