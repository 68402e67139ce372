"""Pick the manifest entries that reference a local path instead of a version."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from linkdoctor.reconcile.models import LinkedDependency

DEFAULT_SCHEMES: tuple[str, ...] = ("file", "link")


def classify(
    dependencies: Mapping[str, str],
    schemes: Iterable[str] = DEFAULT_SCHEMES,
) -> list[LinkedDependency]:
    """Return the filesystem-linked entries of *dependencies*, in manifest order.

    ``"file:../lib-a"`` yields ``declared_relative_path == "../lib-a"`` (the
    text after the last ``:``). Registry specifiers are skipped silently, as
    are local specifiers with an empty path.
    """
    prefixes = tuple(f"{s}:" for s in schemes)
    linked: list[LinkedDependency] = []
    for name, specifier in dependencies.items():
        if not specifier.startswith(prefixes):
            continue
        relative = specifier.rsplit(":", 1)[-1]
        if not relative:
            continue
        linked.append(
            LinkedDependency(name=name, specifier=specifier, declared_relative_path=relative)
        )
    return linked
