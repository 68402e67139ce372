"""Path resolution: where does each store entry really point?"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import structlog

from linkdoctor.fs import FileSystem
from linkdoctor.reconcile.models import (
    LinkedDependency,
    ResolvedDependency,
    UnavailableDependency,
    Verdict,
)

log = structlog.get_logger("linkdoctor.engine")


def expected_path(project_root: Path, declared_relative_path: str) -> Path:
    """Normalized absolute path the manifest says the dependency lives at."""
    return Path(os.path.normpath(project_root / declared_relative_path))


def implied_project_root(canonical_path: Path, declared_relative_path: str) -> Path | None:
    """Strip the declared path from the end of *canonical_path*.

    Returns None when the declared path is not a literal trailing suffix,
    which is always the case for paths containing ``..`` or ``.`` segments.
    """
    suffix = declared_relative_path.rstrip("/")
    if not suffix.startswith("/"):
        suffix = "/" + suffix
    canonical = str(canonical_path)
    if not canonical.endswith(suffix):
        return None
    return Path(canonical[: -len(suffix)] or "/")


async def resolve_paths(
    fs: FileSystem,
    available: list[LinkedDependency],
    project_root: Path,
    store_root: Path,
    registry_root: Path,
) -> tuple[list[ResolvedDependency], list[UnavailableDependency]]:
    """Resolve the canonical path of every store entry concurrently.

    The declared target is resolved as well, so both sides of the
    comparison are symlink-free. A store entry that cannot be resolved
    (dangling or looping link) is reported as ``missing-store-entry``; a
    declared target that cannot be resolved as ``missing-declared-target``.
    """

    async def _resolve_one(dep: LinkedDependency) -> ResolvedDependency | UnavailableDependency:
        store_entry = store_root / dep.name
        registry_entry = registry_root / dep.name
        expected = expected_path(project_root, dep.declared_relative_path)
        try:
            canonical, registry_exists = await asyncio.gather(
                fs.realpath(store_entry), fs.exists(registry_entry)
            )
        except OSError as exc:
            log.warning(
                "resolver.resolution_failed",
                dependency=dep.name,
                path=str(store_entry),
                error=str(exc),
            )
            return UnavailableDependency(dep, Verdict.MISSING_STORE_ENTRY, str(exc))

        try:
            target = await fs.realpath(expected)
        except OSError as exc:
            log.warning(
                "resolver.target_unresolvable",
                dependency=dep.name,
                path=str(expected),
                error=str(exc),
            )
            return UnavailableDependency(dep, Verdict.MISSING_DECLARED_TARGET, str(exc))

        implied = implied_project_root(canonical, dep.declared_relative_path)
        if implied is None:
            log.debug(
                "resolver.suffix_not_found",
                dependency=dep.name,
                canonical=str(canonical),
                declared=dep.declared_relative_path,
            )
        return ResolvedDependency(
            name=dep.name,
            specifier=dep.specifier,
            declared_relative_path=dep.declared_relative_path,
            store_entry_path=store_entry,
            expected_installed_path=expected,
            global_registry_path=registry_entry,
            global_registry_exists=registry_exists,
            canonical_path=canonical,
            resolved_target_path=target,
            implied_project_root=implied,
        )

    results = await asyncio.gather(*(_resolve_one(d) for d in available))

    resolved = [r for r in results if isinstance(r, ResolvedDependency)]
    failed = [r for r in results if isinstance(r, UnavailableDependency)]
    return resolved, failed
