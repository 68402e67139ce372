"""linkdoctor: audit and repair locally-linked package dependencies."""

__version__ = "0.1.0"

from linkdoctor.fs import FileSystem, LocalFileSystem
from linkdoctor.reconcile.engine import Reconciler
from linkdoctor.reconcile.models import (
    DependencyVerdict,
    LinkedDependency,
    PassStatus,
    ReconciliationReport,
    RepairOutcome,
    RepairState,
    ResolvedDependency,
    UnavailableDependency,
    Verdict,
)

__all__ = [
    "DependencyVerdict",
    "FileSystem",
    "LinkedDependency",
    "LocalFileSystem",
    "PassStatus",
    "Reconciler",
    "ReconciliationReport",
    "RepairOutcome",
    "RepairState",
    "ResolvedDependency",
    "UnavailableDependency",
    "Verdict",
]
