"""Saved timer preset persistence."""

import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from ..errors import InvalidConfigError, PersistenceError
from ..logging.config import get_logger
from ..session.builder import SessionBuilder
from ..session.models import SessionConfig


@dataclass(frozen=True)
class StoredPreset:
    """Stored preset with metadata."""
    id: int
    config: SessionConfig
    created_at: str
    updated_at: str


class PresetStore:
    """SQLite-based storage for saved timer presets."""

    def __init__(self, db_path: str = "presets.db"):
        self.db_path = Path(db_path)
        self.logger = get_logger("study_timer.presets")
        self._lock = threading.Lock()
        self._validator = SessionBuilder()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS presets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    label TEXT NOT NULL,
                    total_seconds INTEGER NOT NULL,
                    include_break INTEGER NOT NULL,
                    break_seconds INTEGER NOT NULL,
                    cycles INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_presets_created_at ON presets(created_at)
            """)

            conn.commit()

    @contextmanager
    def _get_connection(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Get database connection, translating sqlite errors."""
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
                f"Preset store {operation} failed: {e}",
                operation=operation,
                target=str(self.db_path)
            ) from e
        finally:
            if conn:
                conn.close()

    def _validate(self, config: SessionConfig) -> None:
        try:
            self._validator.validate(config)
        except InvalidConfigError as e:
            self.logger.warning(
                "Refusing to store invalid preset",
                label=config.label,
                field=e.field,
                value=e.value
            )
            raise

    @staticmethod
    def _row_to_preset(row: sqlite3.Row) -> StoredPreset:
        return StoredPreset(
            id=row["id"],
            config=SessionConfig(
                total_seconds=row["total_seconds"],
                include_break=bool(row["include_break"]),
                break_seconds=row["break_seconds"],
                cycles=row["cycles"],
                label=row["label"],
            ),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def list_presets(self) -> list[StoredPreset]:
        """All presets, oldest first."""
        with self._get_connection("list") as conn:
            cursor = conn.execute("SELECT * FROM presets ORDER BY created_at, id")
            return [self._row_to_preset(row) for row in cursor.fetchall()]

    def get_preset(self, preset_id: int) -> Optional[StoredPreset]:
        with self._get_connection("get") as conn:
            cursor = conn.execute("SELECT * FROM presets WHERE id = ?", (preset_id,))
            row = cursor.fetchone()
            return self._row_to_preset(row) if row else None

    def save_preset(self, config: SessionConfig) -> int:
        """
        Store a new preset.

        Returns:
            ID of the stored preset

        Raises:
            InvalidConfigError: If the configuration could never be started
            PersistenceError: On database failure
        """
        self._validate(config)

        with self._lock:
            with self._get_connection("save") as conn:
                now = datetime.now(timezone.utc).isoformat()
                cursor = conn.execute("""
                    INSERT INTO presets (
                        label, total_seconds, include_break, break_seconds,
                        cycles, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """, (
                    config.label,
                    config.total_seconds,
                    int(config.include_break),
                    config.break_seconds,
                    config.cycles,
                    now,
                    now
                ))
                conn.commit()
                preset_id = cursor.lastrowid

        self.logger.info("Preset saved", preset_id=preset_id, label=config.label)
        return preset_id

    def update_preset(self, preset_id: int, config: SessionConfig) -> bool:
        """Replace a stored preset. Returns False if it does not exist."""
        self._validate(config)

        with self._lock:
            with self._get_connection("update") as conn:
                cursor = conn.execute("""
                    UPDATE presets
                    SET label = ?, total_seconds = ?, include_break = ?,
                        break_seconds = ?, cycles = ?, updated_at = ?
                    WHERE id = ?
                """, (
                    config.label,
                    config.total_seconds,
                    int(config.include_break),
                    config.break_seconds,
                    config.cycles,
                    datetime.now(timezone.utc).isoformat(),
                    preset_id
                ))
                conn.commit()
                updated = cursor.rowcount > 0

        self.logger.info("Preset updated", preset_id=preset_id, updated=updated)
        return updated

    def delete_preset(self, preset_id: int) -> bool:
        """Delete a stored preset. Returns False if it does not exist."""
        with self._lock:
            with self._get_connection("delete") as conn:
                cursor = conn.execute("DELETE FROM presets WHERE id = ?", (preset_id,))
                conn.commit()
                deleted = cursor.rowcount > 0

        self.logger.info("Preset deleted", preset_id=preset_id, deleted=deleted)
        return deleted

    def seed(self, configs: list[SessionConfig]) -> list[int]:
        """Store bundled presets when the store is empty."""
        if self.list_presets():
            return []
        return [self.save_preset(config) for config in configs]
