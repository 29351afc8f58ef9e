from __future__ import annotations

"""SQLite storage for completed focus sessions and application settings."""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from pathlib import Path
from typing import Any, Iterator

from platformdirs import user_data_dir

from studyfocus.core.timer import CompletedFocusRecord

log = logging.getLogger(__name__)

SCHEMA_VERSION = 1
HISTORY_LIMIT = 10
APP_NAME = "studyfocus"


def default_db_path() -> Path:
    return Path(user_data_dir(APP_NAME)) / f"{APP_NAME}.db"


def _to_db_time(value: datetime) -> str:
    # Fixed-width UTC text keeps lexicographic order equal to time order.
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _from_db_time(raw: str) -> datetime:
    return datetime.fromisoformat(raw)


def _day_bounds(day: date, tz: tzinfo | None) -> tuple[datetime, datetime]:
    next_day = day + timedelta(days=1)
    if tz is None:
        return datetime.combine(day, time.min).astimezone(), datetime.combine(next_day, time.min).astimezone()
    return datetime.combine(day, time.min, tzinfo=tz), datetime.combine(next_day, time.min, tzinfo=tz)


class Storage:
    """Wraps the SQLite connection and its transactional operations."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA journal_mode = WAL;")
        except sqlite3.DatabaseError:
            pass
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def _reading(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    def init_db(self) -> None:
        """Creates the tables on first launch."""
        with self._transaction() as conn:
            conn.execute("CREATE TABLE IF NOT EXISTS schema_version (version INTEGER NOT NULL)")
            row = conn.execute("SELECT version FROM schema_version LIMIT 1").fetchone()
            if not row:
                conn.execute("INSERT INTO schema_version(version) VALUES (?)", (SCHEMA_VERSION,))
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS study_sessions(
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    start_at TEXT NOT NULL,
                    end_at TEXT NOT NULL,
                    CHECK (end_at >= start_at)
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_study_sessions_end_at ON study_sessions(end_at)")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS settings(
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
                """
            )
        log.info("Storage ready at %s", self.db_path)

    def get_setting(self, key: str, default: Any = None) -> Any:
        with self._reading() as conn:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        if not row:
            return default
        raw = row["value"]
        try:
            return json.loads(raw)
        except (TypeError, json.JSONDecodeError):
            return raw

    def set_setting(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO settings(key, value) VALUES(?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, payload),
            )

    def insert_focus_record(self, record: CompletedFocusRecord) -> int:
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO study_sessions(start_at, end_at) VALUES (?, ?)",
                (_to_db_time(record.started_at), _to_db_time(record.ended_at)),
            )
            return int(cursor.lastrowid)

    def list_focus_records(self, limit: int = HISTORY_LIMIT) -> list[CompletedFocusRecord]:
        """Returns the most recent focus sessions, newest first."""
        with self._reading() as conn:
            rows = conn.execute(
                "SELECT start_at, end_at FROM study_sessions ORDER BY start_at DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [
            CompletedFocusRecord(started_at=_from_db_time(row["start_at"]), ended_at=_from_db_time(row["end_at"]))
            for row in rows
        ]

    def count_completed_on(self, day: date, tz: tzinfo | None = None) -> int:
        """Counts sessions whose end falls on `day` in `tz` (local time zone by default)."""
        start, end = _day_bounds(day, tz)
        with self._reading() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS c FROM study_sessions WHERE end_at >= ? AND end_at < ?",
                (_to_db_time(start), _to_db_time(end)),
            ).fetchone()
        return int(row["c"] if row else 0)
