"""Run the package manager install command."""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from linkdoctor.exceptions import InstallError

log = structlog.get_logger("linkdoctor.installer")


async def run_command(command: str, cwd: Path | None = None) -> str:
    """Run *command* through the shell and return its trimmed output.

    stdout and stderr are captured together. Raises :class:`InstallError`
    on a non-zero exit code.
    """
    log.info("installer.run", command=command, cwd=str(cwd) if cwd else None)
    proc = await asyncio.create_subprocess_shell(
        command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
        cwd=cwd,
    )
    stdout, _ = await proc.communicate()
    output = stdout.decode(errors="replace").strip()
    if proc.returncode != 0:
        raise InstallError(command, proc.returncode, output)
    return output
