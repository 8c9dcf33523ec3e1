"""Human-readable descriptions of convergence conflicts."""

from __future__ import annotations

from depconverge.core.dependency.models import Dependency, StatusKind


def _origin(dep: Dependency) -> str:
    if dep.top_level or dep.declared_in is None:
        return "your project"
    return dep.declared_in


def _spec(dep: Dependency) -> str:
    parts = [f"{dep.app} from {_origin(dep)}: {dep.source}"]
    if dep.requirement:
        parts.append(f"requirement {dep.requirement!r}")
    if dep.only is not None:
        parts.append(f"only {', '.join(dep.only)}")
    if dep.manager:
        parts.append(f"manager {dep.manager}")
    return ", ".join(parts)


def describe(dep: Dependency) -> str | None:
    """Return a message explaining *dep*'s conflict, or None when it has none."""
    if not dep.diverged:
        return None
    status = dep.status
    other = status.other

    if status.kind is StatusKind.DIVERGED:
        return (
            f"Different specs were given for {dep.app}:\n"
            f"  > {_spec(dep)}\n"
            f"  > {_spec(other)}\n"
            "  Make them match, or declare the dependency in your project "
            "with override: true"
        )
    if status.kind is StatusKind.OVERRIDDEN:
        return (
            f"The dependency {dep.app} in {_origin(dep)} is overriding a child "
            f"dependency:\n"
            f"  > {_spec(dep)}\n"
            f"  > {_spec(other)}\n"
            "  Set override: true on the declaration to accept this"
        )
    if status.kind is StatusKind.DIVERGED_ONLY:
        needed = ", ".join(other.only) if other.only is not None else "all environments"
        return (
            f"The only option for {dep.app} does not cover the environments "
            f"required by {_origin(other)} ({needed}).\n"
            f"  > {_spec(dep)}\n"
            "  Widen the only option or remove it"
        )
    return (
        f"The version {dep.version or '?'} of {dep.app} does not match the "
        f"requirement {other.requirement!r} specified in {_origin(other)}.\n"
        f"  > {_spec(dep)}"
    )


def conflicts(deps: list[Dependency]) -> list[str]:
    """Return one message per diverged node in *deps*, in order."""
    return [message for message in map(describe, deps) if message is not None]
