"""depconverge exception hierarchy.

All public exceptions inherit from DepConvergeError, giving callers a single
base class to catch when they want to handle any depconverge-specific failure
without swallowing unrelated errors.

Dependency conflicts are *not* exceptions: they are recorded as statuses on
the converged nodes so that a single run can report all of them at once.
"""


class DepConvergeError(Exception):
    """Base exception for all depconverge errors."""


class ManifestError(DepConvergeError):
    """Raised when a project manifest cannot be read.

    Covers malformed YAML, missing ``app`` names, and dependency
    declarations without exactly one source (git, path, registry).
    """


class LockfileError(DepConvergeError):
    """Raised when a lockfile cannot be parsed or written."""


class ResolutionError(DepConvergeError):
    """Raised when the converged dependency set cannot be turned into a plan."""


class CycleError(ResolutionError):
    """Raised when the converged dependencies contain a circular edge.

    This is a structural project error: it is never retried and never
    recovered internally. Use ``find_cycles`` to enumerate the offending
    cycles for diagnostics.
    """


class InvalidRequirementError(DepConvergeError, ValueError):
    """Raised when a version requirement or version string cannot be parsed."""
