"""Reconciliation engine: audit and repair filesystem-linked dependencies."""

from linkdoctor.reconcile.engine import Reconciler
from linkdoctor.reconcile.models import ReconciliationReport, Verdict

__all__ = ["Reconciler", "ReconciliationReport", "Verdict"]
