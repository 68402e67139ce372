"""Runtime settings, read from ``LINKDOCTOR_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_DEFAULT_STORE_DIR = "node_modules"
_DEFAULT_INSTALL_COMMAND = "npm i"
_DEFAULT_LOCAL_SCHEMES = ("file", "link")


def default_registry_root() -> Path:
    """Global link registry used by ``yarn link``."""
    return Path.home() / ".config" / "yarn" / "link"


@dataclass(frozen=True)
class Settings:
    registry_root: Path
    store_dir: str = _DEFAULT_STORE_DIR
    install_command: str = _DEFAULT_INSTALL_COMMAND
    local_schemes: tuple[str, ...] = _DEFAULT_LOCAL_SCHEMES

    @classmethod
    def from_env(cls) -> Settings:
        registry = os.environ.get("LINKDOCTOR_GLOBAL_LINK_DIR")
        schemes = os.environ.get("LINKDOCTOR_LOCAL_SCHEMES")
        return cls(
            registry_root=Path(registry).expanduser() if registry else default_registry_root(),
            store_dir=os.environ.get("LINKDOCTOR_STORE_DIR", _DEFAULT_STORE_DIR),
            install_command=os.environ.get("LINKDOCTOR_INSTALL_COMMAND", _DEFAULT_INSTALL_COMMAND),
            local_schemes=(
                tuple(s.strip() for s in schemes.split(",") if s.strip())
                if schemes
                else _DEFAULT_LOCAL_SCHEMES
            ),
        )

    def store_root(self, project_root: Path) -> Path:
        return project_root / self.store_dir
