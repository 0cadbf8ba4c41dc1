from __future__ import annotations

import sqlite3
from datetime import date, datetime

from tg_khatma.db_models import KhatmaGoal, ReadingEntry, UnlockedAchievement


def _row_to_entry(row: sqlite3.Row) -> ReadingEntry:
    return ReadingEntry(
        id=row["id"],
        user_id=int(row["user_id"]),
        read_at=datetime.fromisoformat(row["read_at"]),
        surah_from=int(row["surah_from"]),
        ayah_from=int(row["ayah_from"]),
        surah_to=int(row["surah_to"]),
        ayah_to=int(row["ayah_to"]),
        pages_read=int(row["pages_read"]),
        duration_minutes=int(row["duration_minutes"]),
        notes=row["notes"],
        goal_id=row["goal_id"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _row_to_goal(row: sqlite3.Row) -> KhatmaGoal:
    return KhatmaGoal(
        id=row["id"],
        user_id=int(row["user_id"]),
        name=row["name"],
        start_date=date.fromisoformat(row["start_date"]),
        target_date=date.fromisoformat(row["target_date"]),
        total_pages=int(row["total_pages"]),
        daily_target=int(row["daily_target"]),
        status=row["status"],
        current_progress_pages=int(row["current_progress_pages"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        completed_at=datetime.fromisoformat(row["completed_at"]) if row["completed_at"] else None,
    )


def _row_to_unlocked(row: sqlite3.Row) -> UnlockedAchievement:
    return UnlockedAchievement(
        goal_id=row["goal_id"],
        key=row["key"],
        unlocked_at=datetime.fromisoformat(row["unlocked_at"]),
    )
