"""Repair: rebuild the store -> global registry -> declared source link chain."""

from __future__ import annotations

import asyncio
import errno

import structlog

from linkdoctor.fs import FileSystem
from linkdoctor.reconcile.models import RepairOutcome, RepairState, ResolvedDependency

log = structlog.get_logger("linkdoctor.engine")


async def repair_one(fs: FileSystem, dep: ResolvedDependency) -> RepairOutcome:
    """Run the four repair steps for *dep* in order.

    Nothing is touched unless the registry entry's parent directory exists
    (scoped names need an ``@scope`` directory there). Stops at the first
    failing step; the returned outcome carries the last state that was
    reached, so a partial repair is visible to the caller.
    There is no rollback; the next pass re-detects what is left.
    """
    state = RepairState.MISMATCHED
    try:
        registry_dir = dep.global_registry_path.parent
        if not await fs.exists(registry_dir):
            raise FileNotFoundError(
                errno.ENOENT, "registry directory does not exist", str(registry_dir)
            )

        if dep.global_registry_exists:
            await fs.remove(dep.global_registry_path)
        state = RepairState.REGISTRY_CLEARED

        await fs.remove(dep.store_entry_path)
        state = RepairState.STORE_CLEARED

        await fs.symlink(dep.global_registry_path, dep.expected_installed_path)
        state = RepairState.REGISTRY_LINKED

        await fs.symlink(dep.store_entry_path, dep.global_registry_path)
        state = RepairState.REPAIRED
    except OSError as exc:
        log.error(
            "repair.step_failed",
            dependency=dep.name,
            state=state.value,
            error=str(exc),
        )
        return RepairOutcome(dependency=dep, state=state, error=str(exc))

    log.info(
        "repair.completed",
        dependency=dep.name,
        registry=str(dep.global_registry_path),
        target=str(dep.expected_installed_path),
    )
    return RepairOutcome(dependency=dep, state=state)


async def repair_all(fs: FileSystem, mismatched: list[ResolvedDependency]) -> list[RepairOutcome]:
    """Repair every dependency concurrently; one failure never aborts another."""
    return list(await asyncio.gather(*(repair_one(fs, d) for d in mismatched)))
