"""Availability check: declared target and store entry must both exist."""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from linkdoctor.fs import FileSystem
from linkdoctor.reconcile.models import LinkedDependency, UnavailableDependency, Verdict

log = structlog.get_logger("linkdoctor.engine")


async def check_availability(
    fs: FileSystem,
    linked: list[LinkedDependency],
    project_root: Path,
    store_root: Path,
) -> tuple[list[LinkedDependency], list[UnavailableDependency]]:
    """Partition *linked* into ``(available, unavailable)``.

    Every dependency is probed concurrently and independently; nothing is
    mutated. Input order is preserved within each partition.
    """

    async def _check_one(dep: LinkedDependency) -> UnavailableDependency | None:
        declared = project_root / dep.declared_relative_path
        installed = store_root / dep.name
        declared_exists, installed_exists = await asyncio.gather(
            fs.exists(declared), fs.exists(installed)
        )
        if not declared_exists:
            log.info("checker.missing_declared_target", dependency=dep.name, path=str(declared))
            return UnavailableDependency(dep, Verdict.MISSING_DECLARED_TARGET, str(declared))
        if not installed_exists:
            log.info("checker.missing_store_entry", dependency=dep.name, path=str(installed))
            return UnavailableDependency(dep, Verdict.MISSING_STORE_ENTRY, str(installed))
        return None

    results = await asyncio.gather(*(_check_one(d) for d in linked))

    available = [d for d, r in zip(linked, results) if r is None]
    unavailable = [r for r in results if r is not None]
    return available, unavailable
