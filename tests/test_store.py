from __future__ import annotations

import sqlite3
from dataclasses import replace
from datetime import date, datetime
from zoneinfo import ZoneInfo

from tg_khatma.db import GOAL_COMPLETED, Database, ReadingEntry
from tg_khatma.goals import new_goal, progress_pages


def _dt(y: int, m: int, d: int, h: int = 10, minute: int = 0) -> datetime:
    return datetime(y, m, d, h, minute, tzinfo=ZoneInfo("Asia/Riyadh"))


def _entry(entry_id: str, read_at: datetime, pages: int = 2, goal_id: str | None = None, user_id: int = 1) -> ReadingEntry:
    return ReadingEntry(
        id=entry_id,
        user_id=user_id,
        read_at=read_at,
        surah_from=2,
        ayah_from=1,
        surah_to=2,
        ayah_to=16,
        pages_read=pages,
        duration_minutes=12,
        notes="focus",
        goal_id=goal_id,
        created_at=read_at,
    )


def test_migrations_are_recorded_once(tmp_path) -> None:
    Database(tmp_path / "app.db")
    Database(tmp_path / "app.db")
    with sqlite3.connect(tmp_path / "app.db") as conn:
        versions = [row[0] for row in conn.execute("SELECT version FROM schema_migrations ORDER BY version")]
    assert versions == [1, 2]


def test_append_and_load_round_trip(tmp_path) -> None:
    db = Database(tmp_path / "app.db")
    entry = _entry("e1", _dt(2026, 3, 1, 6, 30))
    stored = db.append_entry(entry)
    assert stored == entry
    assert stored.read_at.hour == 6
    assert db.get_entry("e1") == entry
    assert db.get_entry("missing") is None


def test_append_is_idempotent_by_id(tmp_path) -> None:
    db = Database(tmp_path / "app.db")
    first = db.append_entry(_entry("e1", _dt(2026, 3, 1), pages=3))
    again = db.append_entry(_entry("e1", _dt(2026, 3, 2), pages=9))
    assert again == first
    assert len(db.load_entries(1)) == 1


def test_load_entries_is_ordered_and_scoped(tmp_path) -> None:
    db = Database(tmp_path / "app.db")
    goal = db.add_goal(new_goal("g1", 1, "G", date(2026, 3, 1), date(2026, 4, 1), _dt(2026, 3, 1)))
    db.append_entry(_entry("late", _dt(2026, 3, 5), goal_id=goal.id))
    db.append_entry(_entry("early", _dt(2026, 3, 2), goal_id=goal.id))
    db.append_entry(_entry("free", _dt(2026, 3, 3)))
    db.append_entry(_entry("other-user", _dt(2026, 3, 3), user_id=2))

    assert [e.id for e in db.load_entries(1)] == ["early", "free", "late"]
    assert [e.id for e in db.load_entries(1, goal.id)] == ["early", "late"]
    assert progress_pages(goal, db.load_entries(1, goal.id)) == 4


def test_goal_state_is_persisted(tmp_path) -> None:
    db = Database(tmp_path / "app.db")
    goal = db.add_goal(new_goal("g1", 1, "G", date(2026, 3, 1), date(2026, 4, 1), _dt(2026, 3, 1)))
    assert db.get_goal("g1") == goal

    done = replace(goal, status=GOAL_COMPLETED, current_progress_pages=604, completed_at=_dt(2026, 3, 30))
    assert db.save_goal_state(done) == done
    assert db.count_completed_goals(1) == 1
    assert db.count_completed_goals(2) == 0


def test_list_goals_newest_first(tmp_path) -> None:
    db = Database(tmp_path / "app.db")
    db.add_goal(new_goal("old", 1, "Old", date(2026, 1, 1), date(2026, 2, 1), _dt(2026, 1, 1)))
    db.add_goal(new_goal("new", 1, "New", date(2026, 3, 1), date(2026, 4, 1), _dt(2026, 3, 1)))
    assert [g.id for g in db.list_goals(1)] == ["new", "old"]
    assert db.list_goals(2) == []


def test_unlocked_achievements_only_grow(tmp_path) -> None:
    db = Database(tmp_path / "app.db")
    db.add_goal(new_goal("g1", 1, "G", date(2026, 3, 1), date(2026, 4, 1), _dt(2026, 3, 1)))
    assert db.unlock_achievements("g1", ["first_page", "early_bird"], _dt(2026, 3, 2)) == 2
    assert db.unlock_achievements("g1", ["first_page", "halfway"], _dt(2026, 3, 9)) == 1
    unlocked = db.list_unlocked_achievements("g1")
    assert [u.key for u in unlocked] == ["early_bird", "first_page", "halfway"]
    assert unlocked[1].unlocked_at == _dt(2026, 3, 2)
