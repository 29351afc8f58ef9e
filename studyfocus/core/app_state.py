from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime
from typing import Callable

from PyQt6.QtCore import QObject, pyqtSignal

from studyfocus.core.config import (
    CONFIG_SETTING_KEY,
    SOUND_SETTING_KEY,
    ConfigError,
    SessionConfig,
    config_from_setting,
)
from studyfocus.core.timer import CompletedFocusRecord, FocusTimer, Phase, ScheduledCall, Scheduler, TimerSnapshot
from studyfocus.data.storage import HISTORY_LIMIT, Storage

log = logging.getLogger(__name__)


class _RefreshingScheduler:
    """Runs delayed timer calls through `scheduler`, then reports the new timer state."""

    def __init__(self, scheduler: Scheduler, after: Callable[[], None]) -> None:
        self._scheduler = scheduler
        self._after = after

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        def run() -> None:
            callback()
            self._after()

        return self._scheduler.call_later(delay_ms, run)


class AppState(QObject):
    """Long-lived session object that owns the focus timer and its history.

    The window talks to the timer only through the command methods here, and
    completed focus phases are persisted through :meth:`save_record`.
    """

    timer_changed = pyqtSignal(object)
    history_changed = pyqtSignal()
    config_changed = pyqtSignal(object)
    sound_changed = pyqtSignal(bool)
    phase_ended = pyqtSignal(str)
    notification = pyqtSignal(str, str)

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__()
        self._storage: Storage | None = None
        self.config = SessionConfig()
        self.sound_enabled = True
        self.history: list[CompletedFocusRecord] = []
        self._today = date.today()
        self.timer = FocusTimer(
            self.config,
            on_focus_completed=self.save_record,
            on_phase_ended=self._on_phase_ended,
            scheduler=_RefreshingScheduler(scheduler, self._emit_timer) if scheduler is not None else None,
            clock=clock,
        )

    def load_from_storage(self, storage: Storage) -> None:
        self._storage = storage
        self.config = config_from_setting(storage.get_setting(CONFIG_SETTING_KEY))
        self.timer.configure(self.config)
        self.sound_enabled = bool(storage.get_setting(SOUND_SETTING_KEY, True))
        self.history = storage.list_focus_records(limit=HISTORY_LIMIT)
        log.info("Loaded %s recent focus sessions, config=%s", len(self.history), self.config.to_minutes())
        self.config_changed.emit(self.config)
        self.sound_changed.emit(self.sound_enabled)
        self.history_changed.emit()
        self._emit_timer()

    def snapshot(self) -> TimerSnapshot:
        return self.timer.snapshot()

    def start(self) -> None:
        self.timer.start()
        self._emit_timer()

    def pause(self) -> None:
        self.timer.pause()
        self._emit_timer()

    def toggle(self) -> None:
        self.timer.toggle()
        self._emit_timer()

    def skip(self) -> None:
        self.timer.skip()
        self._emit_timer()

    def reset(self) -> None:
        self.timer.reset()
        self._emit_timer()

    def tick(self) -> TimerSnapshot:
        snapshot = self.timer.tick()
        self.timer_changed.emit(snapshot)
        self.check_day_rollover()
        return snapshot

    def update_config(self, focus_min: int, short_break_min: int, long_break_min: int, intervals: int) -> bool:
        try:
            config = SessionConfig.from_minutes(focus_min, short_break_min, long_break_min, intervals)
        except ConfigError as exc:
            log.warning("Rejected timer config: %s", exc)
            self.notification.emit("error", f"Invalid timer settings: {exc}")
            return False
        self.config = config
        self.timer.configure(config)
        if self._storage:
            self._storage.set_setting(CONFIG_SETTING_KEY, config.to_minutes())
        self.config_changed.emit(config)
        self._emit_timer()
        return True

    def set_sound_enabled(self, enabled: bool) -> None:
        self.sound_enabled = bool(enabled)
        if self._storage:
            self._storage.set_setting(SOUND_SETTING_KEY, self.sound_enabled)
        self.sound_changed.emit(self.sound_enabled)

    def save_record(self, record: CompletedFocusRecord) -> None:
        self.history.insert(0, record)
        del self.history[HISTORY_LIMIT:]
        if self._storage:
            try:
                self._storage.insert_focus_record(record)
            except sqlite3.Error as exc:
                log.error("Failed to save focus session %s → %s", record.started_at, record.ended_at, exc_info=True)
                self.notification.emit("error", f"Could not save focus session: {exc}")
            else:
                log.info("Saved focus session of %.0fs", record.duration_seconds)
        self.history_changed.emit()

    def today_count(self, today: date | None = None) -> int:
        today = today or date.today()
        if self._storage:
            try:
                return self._storage.count_completed_on(today)
            except sqlite3.Error:
                log.error("Failed to count today's focus sessions, using recent history", exc_info=True)
        return sum(1 for record in self.history if record.ended_at.astimezone().date() == today)

    def check_day_rollover(self, today: date | None = None) -> bool:
        """Re-announces the history once the local date changes so per-day counts refresh."""
        today = today or date.today()
        if today == self._today:
            return False
        self._today = today
        log.debug("Local date changed to %s", today)
        self.history_changed.emit()
        return True

    def _on_phase_ended(self, phase: Phase) -> None:
        self.phase_ended.emit(phase.value)

    def _emit_timer(self) -> None:
        self.timer_changed.emit(self.timer.snapshot())
