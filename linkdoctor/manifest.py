"""Manifest provider: read the ``dependencies`` section of package.json."""

from __future__ import annotations

import json
from pathlib import Path

from linkdoctor.exceptions import ManifestError
from linkdoctor.reconcile.engine import validate_dependencies

MANIFEST_NAME = "package.json"


def load_dependencies(project_root: Path) -> dict[str, str]:
    """Return ``{name: specifier}`` from ``project_root/package.json``.

    Raises :class:`ManifestError` if the file is missing, is not valid JSON,
    or has no object-valued ``dependencies`` section.
    """
    manifest_path = project_root / MANIFEST_NAME
    try:
        content = manifest_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ManifestError(f"{manifest_path} does not exist") from None
    except OSError as exc:
        raise ManifestError(f"cannot read {manifest_path}: {exc}") from exc

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"invalid JSON in {manifest_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ManifestError(f"{manifest_path} must contain a JSON object")
    return dict(validate_dependencies(data.get("dependencies")))
