from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Protocol

from studyfocus.core.config import SessionConfig

log = logging.getLogger(__name__)

AUTO_RESUME_DELAY_MS = 1000


class Phase(str, Enum):
    IDLE = "idle"
    FOCUS = "focus"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def is_break(self) -> bool:
        return self in {Phase.SHORT_BREAK, Phase.LONG_BREAK}


@dataclass(frozen=True)
class CompletedFocusRecord:
    started_at: datetime
    ended_at: datetime

    @property
    def duration_seconds(self) -> float:
        return (self.ended_at - self.started_at).total_seconds()


@dataclass(frozen=True)
class TimerSnapshot:
    phase: Phase
    remaining_seconds: int
    total_seconds: int
    progress: float
    completed_intervals: int
    is_running: bool
    focus_started_at: datetime | None
    auto_resume_pending: bool


class ScheduledCall(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall: ...


def _local_now() -> datetime:
    return datetime.now().astimezone()


class FocusTimer:
    """Pomodoro phase machine driven by one-second ticks, detached from UI framework.

    Completed focus phases are reported to ``on_focus_completed`` after the
    transition has already been applied, so a failing collaborator never
    leaves the machine half-way between phases; its errors are logged and the
    phase-ended callback still runs. When a ``scheduler`` is given
    the next phase starts after ``auto_resume_delay_ms``; without one it
    starts immediately.
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        *,
        on_focus_completed: Callable[[CompletedFocusRecord], None] | None = None,
        on_phase_ended: Callable[[Phase], None] | None = None,
        scheduler: Scheduler | None = None,
        clock: Callable[[], datetime] | None = None,
        auto_resume_delay_ms: int = AUTO_RESUME_DELAY_MS,
    ) -> None:
        self._config = (config or SessionConfig()).validate()
        self._on_focus_completed = on_focus_completed
        self._on_phase_ended = on_phase_ended
        self._scheduler = scheduler
        self._clock = clock or _local_now
        self._auto_resume_delay_ms = auto_resume_delay_ms

        self._phase = Phase.IDLE
        self._remaining_sec = 0
        # Duration the current phase was entered with; later config changes do not alter it.
        self._phase_total_sec = 0
        self._completed_intervals = 0
        self._running = False
        self._focus_started_at: datetime | None = None
        # True between an expiry-driven transition and the first run of the new phase.
        self._awaiting_start = False
        self._pending_resume: ScheduledCall | None = None

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_sec

    @property
    def completed_intervals(self) -> int:
        return self._completed_intervals

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def focus_started_at(self) -> datetime | None:
        return self._focus_started_at

    @property
    def auto_resume_pending(self) -> bool:
        return self._pending_resume is not None

    def configure(self, config: SessionConfig) -> None:
        """Replaces the configuration from the next phase on; the current phase keeps its duration."""
        self._config = config.validate()

    def phase_duration(self, phase: Phase) -> int:
        if phase == Phase.FOCUS:
            return self._config.focus_duration_sec
        if phase == Phase.SHORT_BREAK:
            return self._config.short_break_duration_sec
        if phase == Phase.LONG_BREAK:
            return self._config.long_break_duration_sec
        return 0

    def start(self) -> None:
        if self._running:
            return
        if self._phase == Phase.IDLE:
            self._completed_intervals = 0
            self._enter_phase(Phase.FOCUS)
            self._begin_running()
            log.debug("Timer started: focus for %ss", self._remaining_sec)
            return
        self._cancel_pending_resume()
        self._begin_running()
        log.debug("Timer resumed in %s with %ss left", self._phase.value, self._remaining_sec)

    def pause(self) -> None:
        self._cancel_pending_resume()
        if self._running:
            self._running = False
            log.debug("Timer paused in %s with %ss left", self._phase.value, self._remaining_sec)

    def toggle(self) -> None:
        if self._running:
            self.pause()
        else:
            self.start()

    def tick(self) -> TimerSnapshot:
        if not self._running or self._phase == Phase.IDLE:
            return self.snapshot()
        self._remaining_sec = max(0, self._remaining_sec - 1)
        if self._remaining_sec == 0:
            self._expire()
        return self.snapshot()

    def skip(self) -> None:
        if not self._running or self._phase == Phase.IDLE:
            return
        log.debug("Skipping %s with %ss left", self._phase.value, self._remaining_sec)
        self._expire()

    def reset(self) -> None:
        self._cancel_pending_resume()
        self._phase = Phase.IDLE
        self._remaining_sec = 0
        self._phase_total_sec = 0
        self._completed_intervals = 0
        self._running = False
        self._focus_started_at = None
        self._awaiting_start = False
        log.debug("Timer reset")

    def snapshot(self) -> TimerSnapshot:
        total = self._phase_total_sec
        progress = (total - self._remaining_sec) / total if total > 0 else 0.0
        return TimerSnapshot(
            phase=self._phase,
            remaining_seconds=self._remaining_sec,
            total_seconds=total,
            progress=max(0.0, min(1.0, progress)),
            completed_intervals=self._completed_intervals,
            is_running=self._running,
            focus_started_at=self._focus_started_at,
            auto_resume_pending=self.auto_resume_pending,
        )

    def _expire(self) -> None:
        ended = self._phase
        self._cancel_pending_resume()
        self._running = False

        record: CompletedFocusRecord | None = None
        if ended == Phase.FOCUS:
            ended_at = self._clock()
            if self._focus_started_at is not None:
                record = CompletedFocusRecord(started_at=self._focus_started_at, ended_at=ended_at)
            self._completed_intervals += 1
            self._focus_started_at = None
            if self._completed_intervals % self._config.intervals_before_long_break == 0:
                self._enter_phase(Phase.LONG_BREAK)
            else:
                self._enter_phase(Phase.SHORT_BREAK)
        else:
            self._enter_phase(Phase.FOCUS)
        self._awaiting_start = True
        log.debug(
            "Phase %s ended, next %s (%ss), completed=%s",
            ended.value,
            self._phase.value,
            self._remaining_sec,
            self._completed_intervals,
        )

        self._schedule_resume()
        if record is not None and self._on_focus_completed is not None:
            try:
                self._on_focus_completed(record)
            except Exception:
                log.exception("Failed to hand off completed focus session %s → %s", record.started_at, record.ended_at)
        if self._on_phase_ended is not None:
            self._on_phase_ended(ended)

    def _enter_phase(self, phase: Phase) -> None:
        self._phase = phase
        self._remaining_sec = self.phase_duration(phase)
        self._phase_total_sec = self._remaining_sec
        if phase == Phase.FOCUS:
            self._focus_started_at = self._clock()

    def _begin_running(self) -> None:
        if self._awaiting_start and self._phase == Phase.FOCUS:
            # The phase was entered before the auto-resume delay; count focus from now.
            self._focus_started_at = self._clock()
        self._awaiting_start = False
        self._running = True

    def _schedule_resume(self) -> None:
        if self._scheduler is None:
            self._begin_running()
            return
        self._pending_resume = self._scheduler.call_later(self._auto_resume_delay_ms, self._auto_resume)

    def _auto_resume(self) -> None:
        if self._pending_resume is None:
            return
        self._pending_resume = None
        if self._phase == Phase.IDLE or self._running:
            return
        self._begin_running()
        log.debug("Auto-resumed into %s", self._phase.value)

    def _cancel_pending_resume(self) -> None:
        if self._pending_resume is not None:
            self._pending_resume.cancel()
            self._pending_resume = None
