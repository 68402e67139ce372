"""Test doubles for linkdoctor: use in unit / integration tests.

Usage::

    from linkdoctor.testing import MemoryFileSystem

    fs = MemoryFileSystem()
    fs.mkdir("/work/app/node_modules")
    fs.mkdir("/work/lib-a")
    fs.add_symlink("/work/app/node_modules/lib-a", "../../lib-a")
    fs.deny("/home/user/.config/yarn/link/lib-a")   # writes there fail
"""

from __future__ import annotations

import asyncio
import errno
from dataclasses import dataclass
from pathlib import Path

from linkdoctor.fs import FileSystem

_MAX_LINK_DEPTH = 40


@dataclass
class _Entry:
    kind: str  # "dir" | "file" | "link"
    target: Path | None = None


class MemoryFileSystem(FileSystem):
    """In-memory :class:`FileSystem` with directories, files and symlinks.

    Relative link targets are interpreted against the link's parent
    directory, as on POSIX.
    """

    def __init__(self) -> None:
        self._entries: dict[Path, _Entry] = {Path("/"): _Entry("dir")}
        self._denied: set[Path] = set()
        self._ops: list[tuple[str, Path]] = []

    # ── setup helpers ──────────────────────────────────────────────────

    def mkdir(self, path: str | Path) -> None:
        """Create *path* and any missing parents (no links are followed)."""
        path = Path(path)
        for p in reversed([path, *path.parents]):
            self._entries.setdefault(p, _Entry("dir"))

    def write_file(self, path: str | Path) -> None:
        path = Path(path)
        self.mkdir(path.parent)
        self._entries[path] = _Entry("file")

    def add_symlink(self, link: str | Path, target: str | Path) -> None:
        link = Path(link)
        self.mkdir(link.parent)
        self._entries[link] = _Entry("link", Path(target))

    def deny(self, path: str | Path) -> None:
        """Make every remove/symlink at *path* fail with ``PermissionError``."""
        self._denied.add(Path(path))

    def readlink(self, path: str | Path) -> Path:
        entry = self._entries.get(Path(path))
        if entry is None or entry.kind != "link":
            raise OSError(errno.EINVAL, "not a symlink", str(path))
        assert entry.target is not None
        return entry.target

    def is_symlink(self, path: str | Path) -> bool:
        entry = self._entries.get(Path(path))
        return entry is not None and entry.kind == "link"

    @property
    def operations(self) -> list[tuple[str, Path]]:
        """Mutations performed (``("remove" | "symlink", path)``), in order."""
        return list(self._ops)

    # ── FileSystem ─────────────────────────────────────────────────────

    async def exists(self, path: Path) -> bool:
        await asyncio.sleep(0)
        try:
            key = self._key(path)
        except OSError:
            return False
        return key in self._entries

    async def realpath(self, path: Path) -> Path:
        await asyncio.sleep(0)
        return self._resolve(Path(path), 0)

    async def remove(self, path: Path) -> None:
        await asyncio.sleep(0)
        key = self._key(path)
        self._check_writable(key)
        entry = self._entries.get(key)
        if entry is None:
            raise FileNotFoundError(errno.ENOENT, "no such file or directory", str(path))
        if entry.kind == "dir":
            for p in [p for p in self._entries if key in p.parents]:
                del self._entries[p]
        del self._entries[key]
        self._ops.append(("remove", key))

    async def symlink(self, link: Path, target: Path) -> None:
        await asyncio.sleep(0)
        key = self._key(link)
        self._check_writable(key)
        parent = self._entries.get(key.parent)
        if parent is None or parent.kind != "dir":
            raise FileNotFoundError(errno.ENOENT, "no such directory", str(key.parent))
        if key in self._entries:
            raise FileExistsError(errno.EEXIST, "file exists", str(link))
        self._entries[key] = _Entry("link", Path(target))
        self._ops.append(("symlink", key))

    # ── internals ──────────────────────────────────────────────────────

    def _check_writable(self, key: Path) -> None:
        if key in self._denied:
            raise PermissionError(errno.EACCES, "permission denied", str(key))

    def _key(self, path: Path) -> Path:
        """Location of the entry named by *path*, without following its last link."""
        path = Path(path)
        return self._resolve(path.parent, 0) / path.name

    def _resolve(self, path: Path, depth: int) -> Path:
        if depth > _MAX_LINK_DEPTH:
            raise OSError(errno.ELOOP, "too many levels of symbolic links", str(path))
        current = Path("/")
        for part in path.parts[1:]:
            if part == ".":
                continue
            if part == "..":
                current = current.parent
                continue
            candidate = current / part
            entry = self._entries.get(candidate)
            if entry is None:
                raise FileNotFoundError(errno.ENOENT, "no such file or directory", str(path))
            if entry.kind == "link":
                assert entry.target is not None
                target = entry.target if entry.target.is_absolute() else current / entry.target
                current = self._resolve(target, depth + 1)
            else:
                current = candidate
        return current
