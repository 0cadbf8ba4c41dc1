from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from zoneinfo import ZoneInfo

from tg_khatma.aggregation import ReadingStats, SurahCount
from tg_khatma.db import GOAL_COMPLETED, ReadingEntry
from tg_khatma.goals import new_goal
from tg_khatma.messages import _bar, achievements_message, logged_message, progress_message, stats_message
from tg_khatma.progress import compute_snapshot
from tg_khatma.service import AnalyticsView, GoalView, LogOutcome


def _dt(y: int, m: int, d: int, h: int = 10, minute: int = 0) -> datetime:
    return datetime(y, m, d, h, minute, tzinfo=ZoneInfo("Asia/Riyadh"))


def _entry(pages: int = 20, surah_to: int = 2) -> ReadingEntry:
    at = _dt(2026, 3, 5)
    return ReadingEntry("e1", 1, at, 2, 1, surah_to, 5, pages, 35, None, "g1", at)


def _view(entries: list[ReadingEntry], today: date) -> GoalView:
    goal = new_goal("g1", 1, "Ramadan", date(2026, 3, 1), date(2026, 3, 31), _dt(2026, 3, 1))
    return GoalView(goal=goal, snapshot=compute_snapshot(entries, goal, today), unlocked=[], last_7_days=[0, 0, 0, 0, 20, 0, 0])


def test_bar_width() -> None:
    assert _bar(0.5, width=10) == "█████░░░░░"
    assert _bar(2.0, width=4) == "████"


def test_progress_message_shows_pace() -> None:
    text = progress_message(_view([_entry()], date(2026, 3, 5)))
    assert "📖 Ramadan" in text
    assert "Page 20 / 604" in text
    assert "26 days left, 584 pages" in text
    assert "(20 pages)" in text


def test_progress_message_overdue() -> None:
    text = progress_message(_view([_entry()], date(2026, 4, 5)))
    assert "⚠️ Target date 2026-03-31 passed, 584 pages left" in text


def test_progress_message_completed() -> None:
    view = _view([_entry()], date(2026, 3, 5))
    done = replace(view, goal=replace(view.goal, status=GOAL_COMPLETED, completed_at=_dt(2026, 3, 29)))
    assert "✅ Completed on 2026-03-29" in progress_message(done)


def test_logged_message_lists_unlocks() -> None:
    outcome = LogOutcome(
        entry=_entry(surah_to=3),
        duplicate=False,
        goal=None,
        snapshot=None,
        new_achievements=["first_page", "speed_reader"],
        goal_completed=True,
    )
    text = logged_message(outcome)
    assert text.startswith("✅ Logged 20 pages in 35m (2. Al-Baqarah → 3. Aal-Imran)")
    assert "👶 Achievement unlocked: First Steps" in text
    assert "⚡ Achievement unlocked: Speed Reader" in text
    assert "Khatma complete" in text


def test_logged_message_duplicate() -> None:
    outcome = LogOutcome(_entry(), True, None, None, [], False)
    assert logged_message(outcome).startswith("ℹ️ Already logged")


def test_stats_message() -> None:
    view = AnalyticsView(
        stats=ReadingStats(total_sessions=4, total_minutes=130, total_pages=12, average_session_minutes=32, most_read_surah=18),
        current_streak=2,
        longest_streak=5,
        favorite_time="night",
        last_7_days=[0, 1, 2, 3, 0, 0, 6],
        last_30_days=[0] * 30,
        surah_tally=[SurahCount(18, 3), SurahCount(36, 1)],
        weekly=[],
        monthly=[],
        completed_khatmas=1,
    )
    text = stats_message(view)
    assert "Sessions: 4 | Pages: 12" in text
    assert "Time: 2h 10m (avg 32m)" in text
    assert "🌙 Night" in text
    assert "18. Al-Kahf: 3x" in text


def test_stats_message_empty() -> None:
    view = AnalyticsView(ReadingStats(0, 0, 0, 0, None), 0, 0, "morning", [0] * 7, [0] * 30, [], [], [], 0)
    assert stats_message(view).startswith("No readings logged yet")


def test_achievements_message_marks_locked() -> None:
    text = achievements_message(["first_page", "halfway"])
    assert text.startswith("🏅 Achievements (2/12)")
    assert "👶 First Steps" in text
    assert "🔒 Khatma Complete" in text
