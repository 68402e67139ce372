"""Tests for PassProgress."""

from __future__ import annotations

import time

from linkdoctor.progress import PHASES, PassProgress


class TestPassProgress:
    def test_all_phases_pending(self):
        progress = PassProgress()
        assert [p.phase for p in progress.phases] == list(PHASES)
        assert {p.status for p in progress.phases} == {"pending"}

    def test_basic_flow(self):
        progress = PassProgress()
        progress.start("classify")
        progress.complete("classify", detail="2 linked of 5")

        p = progress.get("classify")
        assert p.status == "completed"
        assert p.detail == "2 linked of 5"

    def test_fail(self):
        progress = PassProgress()
        progress.start("repair")
        progress.fail("repair", "1 of 2 repairs failed")

        summary = progress.get_summary()
        repair = [p for p in summary["phases"] if p["phase"] == "repair"][0]
        assert repair["status"] == "failed"
        assert repair["error"] == "1 of 2 repairs failed"

    def test_skip(self):
        progress = PassProgress()
        progress.skip("resolve", "unavailable dependencies")
        assert progress.get("resolve").status == "skipped"
        assert progress.get("resolve").duration is None

    def test_duration(self):
        progress = PassProgress()
        progress.start("resolve")
        time.sleep(0.01)
        progress.complete("resolve")

        assert progress.get("resolve").duration >= 0.01
        assert progress.get_summary()["total_duration"] >= 0.01

    def test_callback(self):
        events = []
        progress = PassProgress()
        progress.callbacks.append(lambda p: events.append((p.phase, p.status)))

        progress.start("detect")
        progress.complete("detect")

        assert events == [("detect", "running"), ("detect", "completed")]

    def test_callback_error_swallowed(self):
        progress = PassProgress()

        def _boom(p):
            raise RuntimeError("boom")

        progress.callbacks.append(_boom)
        progress.start("detect")
        assert progress.get("detect").status == "running"

    def test_reset_keeps_callbacks(self):
        progress = PassProgress()
        seen = []
        progress.callbacks.append(lambda p: seen.append(p.phase))
        progress.start("repair")
        progress.fail("repair", "boom")

        progress.reset()

        assert progress.get("repair").status == "pending"
        assert progress.get("repair").error is None
        progress.skip("repair", "nothing to repair")
        assert seen == ["repair", "repair", "repair"]
