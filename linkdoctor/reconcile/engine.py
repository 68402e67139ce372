"""Reconciler: one check -> detect -> (optional) repair pass."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import structlog

from linkdoctor.exceptions import ManifestError
from linkdoctor.fs import FileSystem
from linkdoctor.progress import PassProgress
from linkdoctor.reconcile.checker import check_availability
from linkdoctor.reconcile.classifier import DEFAULT_SCHEMES, classify
from linkdoctor.reconcile.detector import detect_mismatches
from linkdoctor.reconcile.models import ReconciliationReport
from linkdoctor.reconcile.repair import repair_all
from linkdoctor.reconcile.resolver import resolve_paths

log = structlog.get_logger("linkdoctor.engine")


def validate_dependencies(dependencies: Any) -> Mapping[str, str]:
    """Precondition: a name -> specifier mapping of strings."""
    if not isinstance(dependencies, Mapping):
        raise ManifestError(
            "dependencies section is missing or is not an object "
            f"(got {type(dependencies).__name__})"
        )
    for name, specifier in dependencies.items():
        if not isinstance(name, str) or not isinstance(specifier, str):
            raise ManifestError(f"dependency {name!r} has a non-string specifier: {specifier!r}")
    return dependencies


class Reconciler:
    """Audit and repair the filesystem-linked dependencies of one project.

    Parameters
    ----------
    fs:
        Filesystem all probes and mutations go through.
    project_root:
        Directory holding the manifest; declared paths are relative to it.
    registry_root:
        Global link registry directory (e.g. ``~/.config/yarn/link``).
    store_root:
        Dependency store (``node_modules``). Defaults to ``project_root/node_modules``.
    schemes:
        Specifier schemes treated as local references.
    """

    def __init__(
        self,
        fs: FileSystem,
        project_root: str | Path,
        registry_root: str | Path,
        store_root: str | Path | None = None,
        schemes: Iterable[str] = DEFAULT_SCHEMES,
    ) -> None:
        self._fs = fs
        self.project_root = Path(os.path.abspath(project_root))
        self.store_root = (
            Path(os.path.abspath(store_root))
            if store_root is not None
            else self.project_root / "node_modules"
        )
        self.registry_root = Path(os.path.abspath(registry_root))
        self.schemes = tuple(schemes)
        self.progress = PassProgress()

    async def inspect(self, dependencies: Mapping[str, str]) -> ReconciliationReport:
        """Classify, check, resolve and detect. Read-only.

        Raises :class:`ManifestError` if *dependencies* is not a string
        mapping; every other failure is reported in the returned report.
        """
        progress = self.progress
        progress.reset()
        dependencies = validate_dependencies(dependencies)

        progress.start("classify")
        linked = classify(dependencies, self.schemes)
        progress.complete("classify", f"{len(linked)} linked of {len(dependencies)}")

        progress.start("availability")
        available, unavailable = await check_availability(
            self._fs, linked, self.project_root, self.store_root
        )
        progress.complete("availability", f"{len(unavailable)} unavailable")

        if unavailable:
            log.warning(
                "engine.unavailable",
                count=len(unavailable),
                dependencies=[u.dependency.name for u in unavailable],
            )
            for phase in ("resolve", "detect", "repair"):
                progress.skip(phase, "unavailable dependencies")
            return ReconciliationReport(linked=linked, unavailable=unavailable)

        progress.start("resolve")
        resolved, failed = await resolve_paths(
            self._fs, available, self.project_root, self.store_root, self.registry_root
        )
        progress.complete("resolve", f"{len(resolved)} resolved, {len(failed)} failed")

        progress.start("detect")
        verdicts = detect_mismatches(resolved)
        report = ReconciliationReport(linked=linked, unavailable=failed, verdicts=verdicts)
        progress.complete("detect", f"{len(report.mismatched)} mismatched")
        if not report.mismatched:
            progress.skip("repair", "nothing to repair")
        elif failed:
            progress.skip("repair", "unavailable dependencies")

        log.info(
            "engine.inspected",
            linked=len(linked),
            mismatched=len(report.mismatched),
            unresolvable=len(failed),
        )
        return report

    async def repair(self, report: ReconciliationReport) -> ReconciliationReport:
        """Repair the report's mismatched dependencies.

        Refused when the report has unavailable entries. Returns a new
        report carrying one :class:`RepairOutcome` per mismatched dependency.
        """
        if not report.mismatched:
            self.progress.skip("repair", "nothing to repair")
            return report
        if report.unavailable:
            log.warning(
                "engine.repair_refused",
                unavailable=[u.dependency.name for u in report.unavailable],
            )
            self.progress.skip("repair", "unavailable dependencies")
            return report

        self.progress.start("repair")
        outcomes = await repair_all(self._fs, report.mismatched)
        failed = sum(1 for o in outcomes if not o.succeeded)
        if failed:
            self.progress.fail("repair", f"{failed} of {len(outcomes)} repairs failed")
        else:
            self.progress.complete("repair", f"{len(outcomes)} repaired")
        return dataclasses.replace(report, repairs=outcomes)

    async def reconcile(
        self, dependencies: Mapping[str, str], *, fix: bool = False
    ) -> ReconciliationReport:
        """Full pass; repairs only when *fix* is True (operator confirmation)."""
        report = await self.inspect(dependencies)
        if fix and report.can_repair:
            report = await self.repair(report)
        elif report.can_repair:
            self.progress.skip("repair", "declined")
        return report
