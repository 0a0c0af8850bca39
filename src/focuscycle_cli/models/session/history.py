"""Activity log with SQLite storage."""

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from .constants import TAG_WORK
from .notifications import ActivityEntry


class HistoryLogger:
    """Append-only activity log in a SQLite database."""

    def __init__(self, db_path: Path | None = None):
        """Initialize history logger."""
        if db_path is None:
            from platformdirs import user_data_dir

            data_dir = Path(user_data_dir("focuscycle_cli"))
            db_path = data_dir / "activity_log.db"

        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS activity_entries (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    label TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    timestamp INTEGER NOT NULL,
                    source TEXT NOT NULL,
                    tags TEXT NOT NULL DEFAULT '[]',
                    created_at TEXT NOT NULL
                )
                """
            )

            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_entries_source
                ON activity_entries(source, id)
                """
            )

            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_entries_timestamp
                ON activity_entries(timestamp)
                """
            )

            conn.commit()

    def append(self, entry: ActivityEntry) -> None:
        """Append one entry and record its assigned id on ``entry``."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                """
                INSERT INTO activity_entries (
                    label, description, timestamp, source, tags, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.label,
                    entry.description,
                    entry.timestamp,
                    entry.source,
                    json.dumps(entry.tags),
                    datetime.now().isoformat(),
                ),
            )
            conn.commit()
            entry.id = cursor.lastrowid

    def recent(self, source: str | None = None, limit: int = 20) -> list[ActivityEntry]:
        """
        Get the most recently appended entries, newest first.

        Args:
            source: Only return entries written by this source
            limit: Maximum number of entries to return
        """
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row

            if source:
                cursor = conn.execute(
                    """
                    SELECT * FROM activity_entries
                    WHERE source = ?
                    ORDER BY id DESC
                    LIMIT ?
                    """,
                    (source, limit),
                )
            else:
                cursor = conn.execute(
                    """
                    SELECT * FROM activity_entries
                    ORDER BY id DESC
                    LIMIT ?
                    """,
                    (limit,),
                )

            return [_row_to_entry(row) for row in cursor.fetchall()]

    def get_daily_summary(self, day: str | None = None) -> dict[str, Any]:
        """
        Count completed work entries for one calendar day.

        Args:
            day: ISO date string (YYYY-MM-DD), defaults to today
        """
        if day is None:
            day = datetime.now().date().isoformat()

        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT tags FROM activity_entries
                WHERE DATE(timestamp / 1000, 'unixepoch', 'localtime') = ?
                """,
                (day,),
            ).fetchall()

        work_entries = sum(1 for (tags,) in rows if TAG_WORK in json.loads(tags))
        return {"date": day, "entries": len(rows), "work_sessions": work_entries}

    def delete_old_entries(self, days: int = 90) -> int:
        """
        Delete entries older than N days.

        Returns:
            Number of entries deleted
        """
        from datetime import timedelta

        cutoff_ms = int((datetime.now() - timedelta(days=days)).timestamp() * 1000)

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "DELETE FROM activity_entries WHERE timestamp < ?",
                (cutoff_ms,),
            )
            conn.commit()
            return cursor.rowcount


def _row_to_entry(row: sqlite3.Row) -> ActivityEntry:
    return ActivityEntry(
        id=row["id"],
        label=row["label"],
        description=row["description"],
        timestamp=row["timestamp"],
        source=row["source"],
        tags=json.loads(row["tags"]),
    )
