"""Shared pytest fixtures for linkdoctor tests."""

from pathlib import Path

import pytest

from linkdoctor.reconcile.engine import Reconciler
from linkdoctor.testing import MemoryFileSystem

PROJECT = Path("/work/app")
STORE = PROJECT / "node_modules"
REGISTRY = Path("/home/dev/.config/yarn/link")


@pytest.fixture
def memfs():
    fs = MemoryFileSystem()
    fs.mkdir(STORE)
    fs.mkdir(REGISTRY)
    return fs


@pytest.fixture
def reconciler(memfs):
    return Reconciler(memfs, PROJECT, REGISTRY)


@pytest.fixture
def stale_lib_a(memfs):
    """lib-a declared at ../lib-a, but the store link points one level too high."""
    memfs.mkdir("/work/lib-a")
    memfs.mkdir("/lib-a")
    memfs.add_symlink(STORE / "lib-a", PROJECT / "../../lib-a")
    return {"lib-a": "file:../lib-a"}


@pytest.fixture
def project_dir(tmp_path: Path):
    """Real on-disk layout: <root>/work/app with a node_modules store and a registry dir."""
    root = tmp_path.resolve()
    app = root / "work" / "app"
    (app / "node_modules").mkdir(parents=True)
    (root / "registry").mkdir()
    return app
