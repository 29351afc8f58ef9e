import sqlite3
from datetime import date, timedelta

from studyfocus.core.app_state import AppState
from studyfocus.core.config import SessionConfig
from studyfocus.core.timer import CompletedFocusRecord, Phase
from studyfocus.data.storage import Storage


class BrokenStorage(Storage):
    def insert_focus_record(self, record: CompletedFocusRecord) -> int:
        raise sqlite3.OperationalError("database is locked")


def make_state(tmp_path, clock, scheduler=None, storage_cls=Storage) -> tuple[AppState, Storage]:
    storage = storage_cls(tmp_path / "studyfocus.db")
    storage.init_db()
    state = AppState(scheduler=scheduler, clock=clock)
    state.load_from_storage(storage)
    return state, storage


def test_defaults_loaded_from_empty_storage(tmp_path, clock) -> None:
    state, _storage = make_state(tmp_path, clock)
    assert state.config == SessionConfig()
    assert state.sound_enabled is True
    assert state.history == []
    assert state.snapshot().phase == Phase.IDLE


def test_config_and_sound_persist(tmp_path, clock) -> None:
    state, storage = make_state(tmp_path, clock)
    changed = []
    state.config_changed.connect(changed.append)

    assert state.update_config(50, 10, 20, 2) is True
    state.set_sound_enabled(False)

    again = AppState(clock=clock)
    again.load_from_storage(storage)
    assert again.config == SessionConfig(3000, 600, 1200, 2)
    assert again.timer.config == again.config
    assert again.sound_enabled is False
    assert changed == [SessionConfig(3000, 600, 1200, 2)]


def test_invalid_config_is_rejected_with_notification(tmp_path, clock) -> None:
    state, _storage = make_state(tmp_path, clock)
    notes = []
    state.notification.connect(lambda level, message: notes.append((level, message)))

    assert state.update_config(0, 5, 15, 4) is False

    assert state.config == SessionConfig()
    assert notes and notes[0][0] == "error"


def test_completed_focus_is_saved_and_counted(tmp_path, clock) -> None:
    state, storage = make_state(tmp_path, clock)
    state.update_config(1, 1, 1, 4)
    history_events = []
    ended = []
    state.history_changed.connect(lambda: history_events.append(True))
    state.phase_ended.connect(ended.append)

    state.start()
    for _ in range(60):
        clock.advance(1)
        state.tick()

    assert state.snapshot().phase == Phase.SHORT_BREAK
    assert len(state.history) == 1
    assert state.history[0].duration_seconds == 60
    assert history_events == [True]
    assert ended == ["focus"]
    rows = storage.list_focus_records()
    assert len(rows) == 1
    assert rows[0].ended_at == clock()
    assert state.today_count(clock().astimezone().date()) == 1
    assert state.today_count(clock().astimezone().date() + timedelta(days=1)) == 0


def test_save_failure_notifies_and_keeps_running(tmp_path, clock) -> None:
    state, _storage = make_state(tmp_path, clock, storage_cls=BrokenStorage)
    state.update_config(1, 1, 1, 4)
    notes = []
    state.notification.connect(lambda level, message: notes.append((level, message)))

    state.start()
    for _ in range(60):
        clock.advance(1)
        state.tick()

    snapshot = state.snapshot()
    assert snapshot.phase == Phase.SHORT_BREAK
    assert snapshot.is_running is True
    assert snapshot.completed_intervals == 1
    assert len(state.history) == 1
    assert notes == [("error", "Could not save focus session: database is locked")]


def test_reset_emits_no_record(tmp_path, clock) -> None:
    state, storage = make_state(tmp_path, clock)
    state.start()
    for _ in range(10):
        clock.advance(1)
        state.tick()

    state.reset()

    assert state.snapshot().phase == Phase.IDLE
    assert state.snapshot().completed_intervals == 0
    assert storage.list_focus_records() == []


def test_auto_resume_emits_timer_change(tmp_path, clock, scheduler) -> None:
    state, _storage = make_state(tmp_path, clock, scheduler=scheduler)
    state.update_config(1, 1, 1, 4)
    state.start()
    state.skip()
    assert state.snapshot().is_running is False

    snapshots = []
    state.timer_changed.connect(snapshots.append)
    scheduler.fire_pending()

    assert snapshots[-1].is_running is True
    assert snapshots[-1].phase == Phase.SHORT_BREAK


def test_history_is_capped(tmp_path, clock) -> None:
    state, _storage = make_state(tmp_path, clock)
    start = clock()
    for minute in range(12):
        state.save_record(
            CompletedFocusRecord(
                started_at=start + timedelta(minutes=minute),
                ended_at=start + timedelta(minutes=minute, seconds=30),
            )
        )

    assert len(state.history) == 10
    assert state.history[0].started_at == start + timedelta(minutes=11)


def test_config_change_mid_focus_keeps_remaining_time(tmp_path, clock) -> None:
    state, _storage = make_state(tmp_path, clock)
    state.start()
    for _ in range(100):
        clock.advance(1)
        state.tick()

    assert state.update_config(5, 5, 15, 4) is True

    snapshot = state.snapshot()
    assert snapshot.phase == Phase.FOCUS
    assert snapshot.remaining_seconds == 1400
    assert snapshot.total_seconds == 1500
    assert state.timer.phase_duration(Phase.FOCUS) == 300


def test_day_rollover_refreshes_history_once(tmp_path, clock) -> None:
    state, _storage = make_state(tmp_path, clock)
    history_events = []
    state.history_changed.connect(lambda: history_events.append(True))
    tomorrow = date.today() + timedelta(days=1)

    assert state.check_day_rollover(date.today()) is False
    assert state.check_day_rollover(tomorrow) is True
    assert state.check_day_rollover(tomorrow) is False
    assert history_events == [True]


def test_auto_resume_without_scheduler_starts_next_phase_at_once(tmp_path, clock) -> None:
    state, _storage = make_state(tmp_path, clock)
    state.update_config(1, 1, 1, 4)
    state.start()
    state.skip()

    snapshot = state.snapshot()
    assert snapshot.phase == Phase.SHORT_BREAK
    assert snapshot.is_running is True
    assert snapshot.auto_resume_pending is False
