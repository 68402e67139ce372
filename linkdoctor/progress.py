"""Phase tracking for a reconciliation pass."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

PHASES = ("classify", "availability", "resolve", "detect", "repair")


@dataclass
class PhaseProgress:
    phase: str
    status: str = "pending"  # "pending" | "running" | "completed" | "failed" | "skipped"
    start_time: float | None = None
    end_time: float | None = None
    detail: str = ""
    error: str | None = None

    @property
    def duration(self) -> float | None:
        if self.start_time is not None and self.end_time is not None:
            return round(self.end_time - self.start_time, 3)
        return None


class PassProgress:
    """Record which phases of a pass ran, were skipped, or failed."""

    def __init__(self) -> None:
        self._by_name: dict[str, PhaseProgress] = {p: PhaseProgress(phase=p) for p in PHASES}
        self.callbacks: list[Callable[[PhaseProgress], None]] = []

    def reset(self) -> None:
        """Put every phase back to pending; callbacks stay registered."""
        self._by_name = {p: PhaseProgress(phase=p) for p in PHASES}

    @property
    def phases(self) -> list[PhaseProgress]:
        return [self._by_name[p] for p in PHASES]

    def get(self, phase: str) -> PhaseProgress:
        return self._by_name[phase]

    def start(self, phase: str) -> None:
        p = self._by_name[phase]
        p.status = "running"
        p.start_time = time.monotonic()
        p.end_time = None
        p.error = None
        self._notify(p)

    def complete(self, phase: str, detail: str = "") -> None:
        p = self._by_name[phase]
        p.status = "completed"
        p.end_time = time.monotonic()
        p.detail = detail
        self._notify(p)

    def fail(self, phase: str, error: str) -> None:
        p = self._by_name[phase]
        p.status = "failed"
        p.end_time = time.monotonic()
        p.error = error
        self._notify(p)

    def skip(self, phase: str, reason: str) -> None:
        p = self._by_name[phase]
        p.status = "skipped"
        p.detail = reason
        self._notify(p)

    def get_summary(self) -> dict[str, Any]:
        return {
            "phases": [
                {
                    "phase": p.phase,
                    "status": p.status,
                    "duration": p.duration,
                    "detail": p.detail,
                    "error": p.error,
                }
                for p in self.phases
            ],
            "total_duration": round(sum(p.duration or 0 for p in self.phases), 3),
        }

    def _notify(self, p: PhaseProgress) -> None:
        for cb in self.callbacks:
            try:
                cb(p)
            except Exception:
                logger.debug("Progress callback error for phase %s", p.phase, exc_info=True)
