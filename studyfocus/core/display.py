from __future__ import annotations

"""Text helpers shared by the timer window and its history list."""

from studyfocus.core.timer import CompletedFocusRecord, Phase, TimerSnapshot

PHASE_LABELS = {
    Phase.IDLE: "Ready",
    Phase.FOCUS: "Focus",
    Phase.SHORT_BREAK: "Short Break",
    Phase.LONG_BREAK: "Long Break",
}

NO_VALUE = "—"


def format_clock(seconds: int | float) -> str:
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def phase_label(phase: Phase) -> str:
    return PHASE_LABELS[phase]


def next_break_label(snapshot: TimerSnapshot, intervals: int) -> str:
    if snapshot.phase != Phase.FOCUS:
        return NO_VALUE
    return "Long" if (snapshot.completed_intervals + 1) % intervals == 0 else "Short"


def cycle_label(snapshot: TimerSnapshot, intervals: int) -> str:
    if snapshot.phase == Phase.IDLE:
        return f"0/{intervals}"
    position = snapshot.completed_intervals % intervals
    if snapshot.phase == Phase.FOCUS:
        position += 1
    return f"{position}/{intervals}"


def format_record(record: CompletedFocusRecord) -> str:
    """One history line: local date, start and end times, and the focus length."""
    started = record.started_at.astimezone()
    ended = record.ended_at.astimezone()
    return (
        f"{started:%Y-%m-%d} · {started:%H:%M:%S} → {ended:%H:%M:%S}"
        f" · {format_clock(record.duration_seconds)}"
    )
