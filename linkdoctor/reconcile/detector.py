"""Mismatch detection: pure comparison, no filesystem access."""

from __future__ import annotations

from linkdoctor.reconcile.models import DependencyVerdict, ResolvedDependency, Verdict


def detect_mismatches(resolved: list[ResolvedDependency]) -> list[DependencyVerdict]:
    """Compare each store entry's canonical path with its resolved declared target."""
    return [
        DependencyVerdict(
            dependency=dep,
            verdict=(
                Verdict.OK
                if str(dep.resolved_target_path) == str(dep.canonical_path)
                else Verdict.MISMATCHED
            ),
        )
        for dep in resolved
    ]
