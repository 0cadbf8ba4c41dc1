from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path


class BaseDatabase:
    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """
            )
            current = {row["version"] for row in conn.execute("SELECT version FROM schema_migrations")}

            migrations: dict[int, str] = {
                1: """
                    CREATE TABLE khatma_goals (
                        id TEXT PRIMARY KEY,
                        user_id INTEGER NOT NULL,
                        name TEXT NOT NULL,
                        start_date TEXT NOT NULL,
                        target_date TEXT NOT NULL,
                        total_pages INTEGER NOT NULL CHECK(total_pages BETWEEN 1 AND 604),
                        daily_target INTEGER NOT NULL CHECK(daily_target > 0),
                        status TEXT NOT NULL CHECK(status IN ('active', 'paused', 'completed')),
                        current_progress_pages INTEGER NOT NULL DEFAULT 0,
                        created_at TEXT NOT NULL,
                        completed_at TEXT
                    );

                    CREATE INDEX idx_goals_user_created ON khatma_goals(user_id, created_at);

                    CREATE TABLE reading_entries (
                        id TEXT PRIMARY KEY,
                        user_id INTEGER NOT NULL,
                        read_at TEXT NOT NULL,
                        surah_from INTEGER NOT NULL CHECK(surah_from BETWEEN 1 AND 114),
                        ayah_from INTEGER NOT NULL CHECK(ayah_from > 0),
                        surah_to INTEGER NOT NULL CHECK(surah_to BETWEEN 1 AND 114),
                        ayah_to INTEGER NOT NULL CHECK(ayah_to > 0),
                        pages_read INTEGER NOT NULL CHECK(pages_read > 0),
                        duration_minutes INTEGER NOT NULL CHECK(duration_minutes > 0),
                        notes TEXT,
                        goal_id TEXT REFERENCES khatma_goals(id),
                        created_at TEXT NOT NULL
                    );

                    CREATE INDEX idx_entries_user_read ON reading_entries(user_id, read_at);
                    CREATE INDEX idx_entries_goal ON reading_entries(goal_id);
                """,
                2: """
                    CREATE TABLE goal_achievements (
                        goal_id TEXT NOT NULL REFERENCES khatma_goals(id),
                        key TEXT NOT NULL,
                        unlocked_at TEXT NOT NULL,
                        PRIMARY KEY(goal_id, key)
                    );
                """,
            }

            now = datetime.now().isoformat(timespec="seconds")
            for version in sorted(migrations):
                if version in current:
                    continue
                conn.executescript(migrations[version])
                conn.execute(
                    "INSERT INTO schema_migrations(version, applied_at) VALUES (?, ?)",
                    (version, now),
                )
