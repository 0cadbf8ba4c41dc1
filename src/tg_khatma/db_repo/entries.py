from __future__ import annotations

import sqlite3
from typing import Protocol

from tg_khatma.db_converters import _row_to_entry
from tg_khatma.db_models import ReadingEntry


class DbProtocol(Protocol):
    def _connect(self) -> sqlite3.Connection: ...


class EntryMixin:
    def append_entry(self: DbProtocol, entry: ReadingEntry) -> ReadingEntry:
        """Store *entry* unless its id is already present; return the stored record."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR IGNORE INTO reading_entries(
                    id, user_id, read_at, surah_from, ayah_from, surah_to, ayah_to,
                    pages_read, duration_minutes, notes, goal_id, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id,
                    entry.user_id,
                    entry.read_at.isoformat(),
                    entry.surah_from,
                    entry.ayah_from,
                    entry.surah_to,
                    entry.ayah_to,
                    entry.pages_read,
                    entry.duration_minutes,
                    entry.notes,
                    entry.goal_id,
                    entry.created_at.isoformat(),
                ),
            )
            row = conn.execute("SELECT * FROM reading_entries WHERE id = ?", (entry.id,)).fetchone()
        assert row is not None
        return _row_to_entry(row)

    def get_entry(self: DbProtocol, entry_id: str) -> ReadingEntry | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM reading_entries WHERE id = ?", (entry_id,)).fetchone()
        return _row_to_entry(row) if row else None

    def load_entries(self: DbProtocol, user_id: int, goal_id: str | None = None) -> list[ReadingEntry]:
        with self._connect() as conn:
            if goal_id is None:
                rows = conn.execute(
                    "SELECT * FROM reading_entries WHERE user_id = ? ORDER BY read_at ASC, created_at ASC, id ASC",
                    (user_id,),
                ).fetchall()
            else:
                rows = conn.execute(
                    """
                    SELECT * FROM reading_entries
                    WHERE user_id = ? AND goal_id = ?
                    ORDER BY read_at ASC, created_at ASC, id ASC
                    """,
                    (user_id, goal_id),
                ).fetchall()
        return [_row_to_entry(r) for r in rows]
