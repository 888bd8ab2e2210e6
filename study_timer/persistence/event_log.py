"""Append-only session event log for analytics consumers."""

import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from ..engine.observer import TimerObserver
from ..errors import PersistenceError
from ..logging.config import get_logger
from ..session.models import Phase, SessionPlan

PHASE_COMPLETE = "phase_complete"
SESSION_COMPLETE = "session_complete"


@dataclass(frozen=True)
class SessionEvent:
    """One recorded lifecycle event."""
    id: int
    event_type: str
    name: str
    duration_seconds: int
    is_break: bool
    recorded_at: str


class SessionEventLog(TimerObserver):
    """
    Records phase and session completions as they happen.

    Rows are only ever inserted. Attach it to an engine like any other
    observer; tick notifications are ignored.
    """

    def __init__(self, db_path: str = "session_events.db"):
        self.db_path = Path(db_path)
        self.logger = get_logger("study_timer.events")
        self._lock = threading.Lock()
        self._init_database()

    def _init_database(self) -> None:
        with self._get_connection("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS session_events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    event_type TEXT NOT NULL,
                    name TEXT NOT NULL,
                    duration_seconds INTEGER NOT NULL,
                    is_break INTEGER NOT NULL,
                    recorded_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_session_events_type ON session_events(event_type)
            """)
            conn.commit()

    @contextmanager
    def _get_connection(self, operation: str) -> Iterator[sqlite3.Connection]:
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", operation=operation, error=str(e))
            raise PersistenceError(
                f"Event log {operation} failed: {e}",
                operation=operation,
                target=str(self.db_path)
            ) from e
        finally:
            if conn:
                conn.close()

    def append(self, event_type: str, name: str, duration_seconds: int,
               is_break: bool = False) -> int:
        with self._lock:
            with self._get_connection("append") as conn:
                cursor = conn.execute("""
                    INSERT INTO session_events (
                        event_type, name, duration_seconds, is_break, recorded_at
                    ) VALUES (?, ?, ?, ?, ?)
                """, (
                    event_type,
                    name,
                    duration_seconds,
                    int(is_break),
                    datetime.now(timezone.utc).isoformat()
                ))
                conn.commit()
                return cursor.lastrowid

    # ----- TimerObserver -----

    def on_phase_complete(self, phase: Phase) -> None:
        self.append(PHASE_COMPLETE, phase.name, phase.duration_seconds, phase.is_break)

    def on_session_complete(self, plan: SessionPlan) -> None:
        self.append(SESSION_COMPLETE, plan.name, plan.total_seconds)
        self.logger.info("Session recorded", plan_name=plan.name, total_seconds=plan.total_seconds)

    # ----- Queries -----

    def events(self, limit: Optional[int] = None) -> list[SessionEvent]:
        """Events in insertion order, optionally only the most recent ``limit``."""
        with self._get_connection("events") as conn:
            if limit is None:
                rows = conn.execute("SELECT * FROM session_events ORDER BY id").fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM (SELECT * FROM session_events ORDER BY id DESC LIMIT ?) "
                    "ORDER BY id",
                    (limit,)
                ).fetchall()

        return [
            SessionEvent(
                id=row["id"],
                event_type=row["event_type"],
                name=row["name"],
                duration_seconds=row["duration_seconds"],
                is_break=bool(row["is_break"]),
                recorded_at=row["recorded_at"],
            )
            for row in rows
        ]

    def count(self, event_type: Optional[str] = None) -> int:
        with self._get_connection("count") as conn:
            if event_type is None:
                row = conn.execute("SELECT COUNT(*) FROM session_events").fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(*) FROM session_events WHERE event_type = ?",
                    (event_type,)
                ).fetchone()
        return row[0]

    def completed_study_seconds(self) -> int:
        """Total duration of completed study (non-break) phases."""
        with self._get_connection("study_seconds") as conn:
            row = conn.execute("""
                SELECT COALESCE(SUM(duration_seconds), 0) FROM session_events
                WHERE event_type = ? AND is_break = 0
            """, (PHASE_COMPLETE,)).fetchone()
        return row[0]
