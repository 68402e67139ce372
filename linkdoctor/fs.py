"""Filesystem abstraction used by the reconciliation engine.

The engine's state is the real filesystem. Every probe, resolution and
link mutation goes through a :class:`FileSystem` so tests can substitute
:class:`linkdoctor.testing.MemoryFileSystem`.
"""

from __future__ import annotations

import asyncio
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path


class FileSystem(ABC):
    """Async filesystem operations needed to audit and repair link chains."""

    @abstractmethod
    async def exists(self, path: Path) -> bool:
        """Return True if any entry (including a dangling link) is at *path*."""
        ...

    @abstractmethod
    async def realpath(self, path: Path) -> Path:
        """Resolve *path* through every symlink.

        Raises ``OSError`` when the chain is dangling or loops.
        """
        ...

    @abstractmethod
    async def remove(self, path: Path) -> None:
        """Remove the entry at *path* without following a final symlink."""
        ...

    @abstractmethod
    async def symlink(self, link: Path, target: Path) -> None:
        """Create *link* pointing at *target*."""
        ...


class LocalFileSystem(FileSystem):
    """The real filesystem; blocking calls run in worker threads."""

    async def exists(self, path: Path) -> bool:
        return await asyncio.to_thread(os.path.lexists, path)

    async def realpath(self, path: Path) -> Path:
        resolved = await asyncio.to_thread(os.path.realpath, path, strict=True)
        return Path(resolved)

    async def remove(self, path: Path) -> None:
        await asyncio.to_thread(_remove, path)

    async def symlink(self, link: Path, target: Path) -> None:
        await asyncio.to_thread(os.symlink, target, link)


def _remove(path: Path) -> None:
    # Some package managers copy file: dependencies instead of linking them
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
