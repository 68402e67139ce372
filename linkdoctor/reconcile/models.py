"""Data models for the reconciliation engine.

Each phase produces its own record type, so the type of a value always
reflects which phase has completed for it:

    LinkedDependency -> ResolvedDependency -> DependencyVerdict -> RepairOutcome

Dependencies that fall out of the pipeline early are wrapped in
:class:`UnavailableDependency` instead.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class Verdict(str, enum.Enum):
    OK = "ok"
    MISMATCHED = "mismatched"
    MISSING_DECLARED_TARGET = "missing-declared-target"
    MISSING_STORE_ENTRY = "missing-store-entry"


class RepairState(str, enum.Enum):
    """Last successfully completed step of a repair sequence."""

    MISMATCHED = "mismatched"
    REGISTRY_CLEARED = "registry-cleared"
    STORE_CLEARED = "store-cleared"
    REGISTRY_LINKED = "registry-linked"
    REPAIRED = "repaired"


class PassStatus(str, enum.Enum):
    CLEAN = "clean"
    ISSUES = "issues"


@dataclass(frozen=True)
class LinkedDependency:
    """A manifest entry whose specifier is a local filesystem reference."""

    name: str
    specifier: str
    declared_relative_path: str


@dataclass(frozen=True)
class UnavailableDependency:
    """A dependency that cannot be resolved; needs a manual fix."""

    dependency: LinkedDependency
    verdict: Verdict
    detail: str | None = None


@dataclass(frozen=True)
class ResolvedDependency(LinkedDependency):
    """A linked dependency whose store entry resolved to a canonical path."""

    store_entry_path: Path
    expected_installed_path: Path
    global_registry_path: Path
    global_registry_exists: bool
    canonical_path: Path
    # expected_installed_path with every symlink resolved
    resolved_target_path: Path
    # None when the declared path is not a literal suffix of canonical_path
    implied_project_root: Path | None


@dataclass(frozen=True)
class DependencyVerdict:
    dependency: ResolvedDependency
    verdict: Verdict


@dataclass(frozen=True)
class RepairOutcome:
    """Result of repairing one dependency.

    ``state`` is the last step that completed; on failure ``error`` holds
    the message of the step that did not.
    """

    dependency: ResolvedDependency
    state: RepairState
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is RepairState.REPAIRED and self.error is None


@dataclass(frozen=True)
class ReconciliationReport:
    """Everything one reconciliation pass found and did."""

    linked: list[LinkedDependency] = field(default_factory=list)
    unavailable: list[UnavailableDependency] = field(default_factory=list)
    verdicts: list[DependencyVerdict] = field(default_factory=list)
    repairs: list[RepairOutcome] = field(default_factory=list)

    @property
    def mismatched(self) -> list[ResolvedDependency]:
        return [v.dependency for v in self.verdicts if v.verdict is Verdict.MISMATCHED]

    @property
    def can_repair(self) -> bool:
        return not self.unavailable and bool(self.mismatched)

    @property
    def failed_repairs(self) -> list[RepairOutcome]:
        return [r for r in self.repairs if not r.succeeded]

    @property
    def status(self) -> PassStatus:
        if self.unavailable:
            return PassStatus.ISSUES
        repaired = {r.dependency.name for r in self.repairs if r.succeeded}
        if any(d.name not in repaired for d in self.mismatched):
            return PassStatus.ISSUES
        return PassStatus.CLEAN

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "unavailable": [
                {
                    "name": u.dependency.name,
                    "specifier": u.dependency.specifier,
                    "reason": u.verdict.value,
                    "detail": u.detail,
                }
                for u in self.unavailable
            ],
            "verdicts": [
                {
                    "name": v.dependency.name,
                    "specifier": v.dependency.specifier,
                    "verdict": v.verdict.value,
                    "expected_path": str(v.dependency.expected_installed_path),
                    "canonical_path": str(v.dependency.canonical_path),
                    "resolved_target_path": str(v.dependency.resolved_target_path),
                }
                for v in self.verdicts
            ],
            "repairs": [
                {
                    "name": r.dependency.name,
                    "succeeded": r.succeeded,
                    "state": r.state.value,
                    "error": r.error,
                }
                for r in self.repairs
            ],
        }
