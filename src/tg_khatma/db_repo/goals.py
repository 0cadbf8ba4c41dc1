from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from tg_khatma.db_converters import _row_to_goal, _row_to_unlocked
from tg_khatma.db_models import KhatmaGoal, UnlockedAchievement


class DbProtocol(Protocol):
    def _connect(self) -> sqlite3.Connection: ...


class GoalMixin:
    def add_goal(self: DbProtocol, goal: KhatmaGoal) -> KhatmaGoal:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO khatma_goals(
                    id, user_id, name, start_date, target_date, total_pages, daily_target,
                    status, current_progress_pages, created_at, completed_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    goal.id,
                    goal.user_id,
                    goal.name,
                    goal.start_date.isoformat(),
                    goal.target_date.isoformat(),
                    goal.total_pages,
                    goal.daily_target,
                    goal.status,
                    goal.current_progress_pages,
                    goal.created_at.isoformat(),
                    goal.completed_at.isoformat() if goal.completed_at else None,
                ),
            )
            row = conn.execute("SELECT * FROM khatma_goals WHERE id = ?", (goal.id,)).fetchone()
        assert row is not None
        return _row_to_goal(row)

    def get_goal(self: DbProtocol, goal_id: str) -> KhatmaGoal | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM khatma_goals WHERE id = ?", (goal_id,)).fetchone()
        return _row_to_goal(row) if row else None

    def list_goals(self: DbProtocol, user_id: int) -> list[KhatmaGoal]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM khatma_goals WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
                (user_id,),
            ).fetchall()
        return [_row_to_goal(r) for r in rows]

    def save_goal_state(self: DbProtocol, goal: KhatmaGoal) -> KhatmaGoal:
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE khatma_goals
                SET status = ?, current_progress_pages = ?, daily_target = ?, completed_at = ?
                WHERE id = ?
                """,
                (
                    goal.status,
                    goal.current_progress_pages,
                    goal.daily_target,
                    goal.completed_at.isoformat() if goal.completed_at else None,
                    goal.id,
                ),
            )
            row = conn.execute("SELECT * FROM khatma_goals WHERE id = ?", (goal.id,)).fetchone()
        assert row is not None
        return _row_to_goal(row)

    def count_completed_goals(self: DbProtocol, user_id: int) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS n FROM khatma_goals WHERE user_id = ? AND status = 'completed'",
                (user_id,),
            ).fetchone()
        return int(row["n"]) if row else 0

    def unlock_achievements(self: DbProtocol, goal_id: str, keys: Iterable[str], unlocked_at: datetime) -> int:
        inserted = 0
        with self._connect() as conn:
            for key in keys:
                cur = conn.execute(
                    "INSERT OR IGNORE INTO goal_achievements(goal_id, key, unlocked_at) VALUES (?, ?, ?)",
                    (goal_id, key, unlocked_at.isoformat()),
                )
                inserted += cur.rowcount
        return inserted

    def list_unlocked_achievements(self: DbProtocol, goal_id: str) -> list[UnlockedAchievement]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM goal_achievements WHERE goal_id = ? ORDER BY unlocked_at ASC, key ASC",
                (goal_id,),
            ).fetchall()
        return [_row_to_unlocked(r) for r in rows]
