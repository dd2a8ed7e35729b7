"""Tests for dashboard formatting helpers and the fallback alert queue."""

import pytest

from flowfit.core.models.settings import TimeBlock
from flowfit.core.models.state import Phase, WorkoutSnapshot, WorkoutState
from flowfit.ui.dashboard import AlertQueue, describe, format_remaining


def _snap(phase=Phase.IDLE, within=True, **state) -> WorkoutSnapshot:
    return WorkoutSnapshot(
        phase=phase, remaining_ms=0, state=WorkoutState(**state), within_work_hours=within
    )


class TestFormatRemaining:
    @pytest.mark.parametrize(
        "ms, text",
        [
            (0, "00:00"),
            (999, "00:00"),
            (300_000, "05:00"),
            (3_599_000, "59:59"),
            (3_600_000, "1:00:00"),
            (-5, "00:00"),
        ],
    )
    def test_format(self, ms, text):
        assert format_remaining(ms) == text


class TestDescribe:
    def test_time_block_wins(self):
        block = TimeBlock(id="1", title="Lunch", start_time="12:00", end_time="13:00")
        snap = _snap(is_paused=True, is_time_block_paused=True, active_time_block=block, paused_time_remaining=5)
        assert describe(snap) == "Paused for Lunch"

    def test_paused(self):
        assert describe(_snap(Phase.WAITING_FOCUS, is_paused=True, next_workout_time=1)) == "Paused"

    def test_idle_work_hours(self):
        assert describe(_snap(within=True)) == "Within work hours"
        assert describe(_snap(within=False)) == "Outside work hours"

    def test_skipped(self):
        snap = _snap(Phase.WAITING_FOCUS, next_workout_time=1, missed_last_workout=True)
        assert describe(snap) == "Last workout skipped"

    def test_cycle(self):
        snap = _snap(Phase.WORKOUT_ACTIVE, workout_phase_start_time=1, current_activity="x", completed_cycles=2)
        assert describe(snap) == "Cycle 2"


class TestAlertQueue:
    def test_push_and_drain(self):
        q = AlertQueue()
        q.push("T1", "B1")
        q.push("T2", "B2")
        assert len(q) == 2
        assert q.drain() == [("T1", "B1"), ("T2", "B2")]
        assert len(q) == 0

    def test_bounded(self):
        q = AlertQueue(maxlen=2)
        for i in range(5):
            q.push(f"T{i}", "")
        assert [t for t, _ in q.drain()] == ["T3", "T4"]
