"""Tests for the repair executor: step order and partial failures."""

from __future__ import annotations

import errno
from pathlib import Path

import pytest
from conftest import PROJECT, REGISTRY, STORE

from linkdoctor.reconcile.models import RepairState, ResolvedDependency
from linkdoctor.reconcile.repair import repair_all, repair_one
from linkdoctor.testing import MemoryFileSystem


def _dep(name: str, *, registry_exists: bool = False) -> ResolvedDependency:
    return ResolvedDependency(
        name=name,
        specifier=f"file:../{name}",
        declared_relative_path=f"../{name}",
        store_entry_path=STORE / name,
        expected_installed_path=Path("/work") / name,
        global_registry_path=REGISTRY / name,
        global_registry_exists=registry_exists,
        canonical_path=Path("/") / name,
        resolved_target_path=Path("/work") / name,
        implied_project_root=None,
    )


def _stale(fs: MemoryFileSystem, name: str) -> None:
    fs.mkdir(f"/work/{name}")
    fs.mkdir(f"/{name}")
    fs.add_symlink(STORE / name, PROJECT / ".." / ".." / name)


class _FailingSymlinkFS(MemoryFileSystem):
    """Fails only when creating a link at one specific path."""

    def __init__(self, fail_at: Path) -> None:
        super().__init__()
        self._fail_at = fail_at

    async def symlink(self, link: Path, target: Path) -> None:
        if link == self._fail_at:
            raise OSError(errno.EIO, "i/o error", str(link))
        await super().symlink(link, target)


class TestRepairOne:
    @pytest.mark.asyncio
    async def test_rebuilds_two_level_chain(self, memfs):
        _stale(memfs, "lib-a")

        outcome = await repair_one(memfs, _dep("lib-a"))

        assert outcome.succeeded
        assert outcome.state is RepairState.REPAIRED
        assert memfs.readlink(STORE / "lib-a") == REGISTRY / "lib-a"
        assert memfs.readlink(REGISTRY / "lib-a") == Path("/work/lib-a")
        assert await memfs.realpath(STORE / "lib-a") == Path("/work/lib-a")

    @pytest.mark.asyncio
    async def test_step_order_without_registry_entry(self, memfs):
        _stale(memfs, "lib-a")

        await repair_one(memfs, _dep("lib-a"))

        assert memfs.operations == [
            ("remove", STORE / "lib-a"),
            ("symlink", REGISTRY / "lib-a"),
            ("symlink", STORE / "lib-a"),
        ]

    @pytest.mark.asyncio
    async def test_existing_registry_entry_removed_first(self, memfs):
        _stale(memfs, "lib-a")
        memfs.add_symlink(REGISTRY / "lib-a", "/old/lib-a")

        outcome = await repair_one(memfs, _dep("lib-a", registry_exists=True))

        assert outcome.succeeded
        assert memfs.operations[0] == ("remove", REGISTRY / "lib-a")
        assert memfs.readlink(REGISTRY / "lib-a") == Path("/work/lib-a")

    @pytest.mark.asyncio
    async def test_registry_removal_fails(self, memfs):
        _stale(memfs, "lib-a")
        memfs.add_symlink(REGISTRY / "lib-a", "/old/lib-a")
        memfs.deny(REGISTRY / "lib-a")

        outcome = await repair_one(memfs, _dep("lib-a", registry_exists=True))

        assert not outcome.succeeded
        assert outcome.state is RepairState.MISMATCHED
        assert "permission denied" in outcome.error
        # store entry untouched
        assert memfs.readlink(STORE / "lib-a") == PROJECT / ".." / ".." / "lib-a"

    @pytest.mark.asyncio
    async def test_store_removal_fails(self, memfs):
        _stale(memfs, "lib-a")
        memfs.deny(STORE / "lib-a")

        outcome = await repair_one(memfs, _dep("lib-a"))

        assert outcome.state is RepairState.REGISTRY_CLEARED
        assert outcome.error is not None

    @pytest.mark.asyncio
    async def test_registry_link_fails(self, memfs):
        _stale(memfs, "lib-a")
        memfs.deny(REGISTRY / "lib-a")

        outcome = await repair_one(memfs, _dep("lib-a"))

        assert outcome.state is RepairState.STORE_CLEARED
        assert not await memfs.exists(STORE / "lib-a")

    @pytest.mark.asyncio
    async def test_missing_registry_scope_dir_leaves_store_intact(self, memfs):
        memfs.mkdir("/work/lib-a")
        memfs.mkdir(STORE / "@scope")
        memfs.add_symlink(STORE / "@scope" / "pkg", "/elsewhere")
        dep = ResolvedDependency(
            name="@scope/pkg",
            specifier="file:../lib-a",
            declared_relative_path="../lib-a",
            store_entry_path=STORE / "@scope" / "pkg",
            expected_installed_path=Path("/work/lib-a"),
            global_registry_path=REGISTRY / "@scope" / "pkg",
            global_registry_exists=False,
            canonical_path=Path("/elsewhere"),
            resolved_target_path=Path("/work/lib-a"),
            implied_project_root=None,
        )

        outcome = await repair_one(memfs, dep)

        assert outcome.state is RepairState.MISMATCHED
        assert "registry directory does not exist" in outcome.error
        assert memfs.operations == []
        assert memfs.readlink(STORE / "@scope" / "pkg") == Path("/elsewhere")

    @pytest.mark.asyncio
    async def test_store_link_fails(self):
        fs = _FailingSymlinkFS(fail_at=STORE / "lib-a")
        fs.mkdir(STORE)
        fs.mkdir(REGISTRY)
        _stale(fs, "lib-a")

        outcome = await repair_one(fs, _dep("lib-a"))

        assert outcome.state is RepairState.REGISTRY_LINKED
        assert "i/o error" in outcome.error
        assert fs.readlink(REGISTRY / "lib-a") == Path("/work/lib-a")


class TestRepairAll:
    @pytest.mark.asyncio
    async def test_failure_is_isolated(self, memfs):
        _stale(memfs, "lib-a")
        _stale(memfs, "lib-b")
        memfs.deny(REGISTRY / "lib-a")

        outcomes = await repair_all(memfs, [_dep("lib-a"), _dep("lib-b")])

        by_name = {o.dependency.name: o for o in outcomes}
        assert not by_name["lib-a"].succeeded
        assert by_name["lib-b"].succeeded
        assert memfs.readlink(STORE / "lib-b") == REGISTRY / "lib-b"

    @pytest.mark.asyncio
    async def test_empty(self, memfs):
        assert await repair_all(memfs, []) == []
