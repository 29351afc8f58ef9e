from datetime import datetime, timedelta, timezone

from studyfocus.core.display import cycle_label, format_clock, format_record, next_break_label, phase_label
from studyfocus.core.timer import CompletedFocusRecord, Phase, TimerSnapshot


def snapshot(phase: Phase, completed: int) -> TimerSnapshot:
    return TimerSnapshot(
        phase=phase,
        remaining_seconds=0,
        total_seconds=0,
        progress=0.0,
        completed_intervals=completed,
        is_running=False,
        focus_started_at=None,
        auto_resume_pending=False,
    )


def test_format_clock() -> None:
    assert format_clock(0) == "00:00"
    assert format_clock(59) == "00:59"
    assert format_clock(1500) == "25:00"
    assert format_clock(3725) == "01:02:05"
    assert format_clock(-4) == "00:00"


def test_phase_labels() -> None:
    assert phase_label(Phase.IDLE) == "Ready"
    assert phase_label(Phase.LONG_BREAK) == "Long Break"


def test_next_break_only_during_focus() -> None:
    assert next_break_label(snapshot(Phase.FOCUS, 0), 4) == "Short"
    assert next_break_label(snapshot(Phase.FOCUS, 3), 4) == "Long"
    assert next_break_label(snapshot(Phase.SHORT_BREAK, 1), 4) == "—"
    assert next_break_label(snapshot(Phase.IDLE, 0), 4) == "—"


def test_cycle_label() -> None:
    assert cycle_label(snapshot(Phase.IDLE, 0), 4) == "0/4"
    assert cycle_label(snapshot(Phase.FOCUS, 0), 4) == "1/4"
    assert cycle_label(snapshot(Phase.SHORT_BREAK, 1), 4) == "1/4"
    assert cycle_label(snapshot(Phase.LONG_BREAK, 4), 4) == "0/4"
    assert cycle_label(snapshot(Phase.FOCUS, 5), 4) == "2/4"


def test_format_record_shows_duration() -> None:
    start = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
    line = format_record(CompletedFocusRecord(started_at=start, ended_at=start + timedelta(minutes=25)))
    assert line.endswith("· 25:00")
    assert "→" in line
