from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime

from tg_khatma.achievements import evaluate_achievements, merge_unlocked
from tg_khatma.aggregation import (
    PeriodTotals,
    ReadingStats,
    SurahCount,
    compute_favorite_time,
    compute_monthly_totals,
    compute_reading_stats,
    compute_surah_tally,
    compute_weekly_totals,
    compute_window,
)
from tg_khatma.db import GOAL_COMPLETED, Database, KhatmaGoal, ReadingEntry
from tg_khatma.errors import GOAL_NOT_FOUND, EntryConflictError, GoalStateError
from tg_khatma.goals import apply_progress, ensure_accepts_entries, new_goal, pause_goal, resume_goal
from tg_khatma.progress import ProgressSnapshot, compute_snapshot, current_streak, longest_streak, reading_days
from tg_khatma.quran_reference import MUSHAF_PAGES, QuranReference
from tg_khatma.time_utils import entry_day
from tg_khatma.validation import validate_entry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogOutcome:
    entry: ReadingEntry
    duplicate: bool
    goal: KhatmaGoal | None
    snapshot: ProgressSnapshot | None
    new_achievements: list[str]
    goal_completed: bool


@dataclass(frozen=True)
class GoalView:
    goal: KhatmaGoal
    snapshot: ProgressSnapshot
    unlocked: list[str]
    last_7_days: list[int]


@dataclass(frozen=True)
class AnalyticsView:
    stats: ReadingStats
    current_streak: int
    longest_streak: int
    favorite_time: str
    last_7_days: list[int]
    last_30_days: list[int]
    surah_tally: list[SurahCount]
    weekly: list[PeriodTotals]
    monthly: list[PeriodTotals]
    completed_khatmas: int


def _new_id() -> str:
    return uuid.uuid4().hex


def _load_owned_goal(db: Database, user_id: int, goal_id: str) -> KhatmaGoal:
    goal = db.get_goal(goal_id)
    if goal is None or goal.user_id != user_id:
        raise GoalStateError(GOAL_NOT_FOUND, goal_id, f"Khatma goal {goal_id} does not exist")
    return goal


def start_khatma(
    db: Database,
    user_id: int,
    name: str,
    start_date: date,
    target_date: date,
    now: datetime,
    total_pages: int = MUSHAF_PAGES,
    daily_target: int | None = None,
) -> KhatmaGoal:
    goal = new_goal(
        goal_id=_new_id(),
        user_id=user_id,
        name=name,
        start_date=start_date,
        target_date=target_date,
        created_at=now,
        total_pages=total_pages,
        daily_target=daily_target,
    )
    stored = db.add_goal(goal)
    logger.info("Started khatma %s for user %s (%s pages/day)", stored.id, user_id, stored.daily_target)
    return stored


def _settle_goal(db: Database, goal: KhatmaGoal, now: datetime) -> tuple[KhatmaGoal, list[ReadingEntry]]:
    entries = db.load_entries(goal.user_id, goal.id)
    updated = apply_progress(goal, entries, now)
    if updated != goal:
        updated = db.save_goal_state(updated)
        if updated.status == GOAL_COMPLETED and goal.status != GOAL_COMPLETED:
            logger.info("Khatma %s completed for user %s", goal.id, goal.user_id)
    return updated, entries


def log_reading(
    db: Database,
    user_id: int,
    surah_from: int,
    ayah_from: int,
    surah_to: int,
    ayah_to: int,
    pages_read: int,
    duration_minutes: int,
    now: datetime,
    read_at: datetime | None = None,
    notes: str | None = None,
    goal_id: str | None = None,
    entry_id: str | None = None,
    reference: QuranReference | None = None,
) -> LogOutcome:
    fields = validate_entry(
        read_at=read_at or now,
        surah_from=surah_from,
        ayah_from=ayah_from,
        surah_to=surah_to,
        ayah_to=ayah_to,
        pages_read=pages_read,
        duration_minutes=duration_minutes,
        notes=notes,
        reference=reference,
        latest=now,
    )

    goal: KhatmaGoal | None = None
    existing = db.get_entry(entry_id) if entry_id else None
    if existing is not None and existing.user_id != user_id:
        raise EntryConflictError(existing.id)
    if existing is not None:
        # replayed entry: settle whatever goal it was originally logged against
        if existing.goal_id is not None:
            goal = _load_owned_goal(db, user_id, existing.goal_id)
    elif goal_id is not None:
        goal = ensure_accepts_entries(db.get_goal(goal_id), goal_id)
        if goal.user_id != user_id:
            raise GoalStateError(GOAL_NOT_FOUND, goal_id, f"Khatma goal {goal_id} does not exist")

    entry = ReadingEntry(
        id=entry_id or _new_id(),
        user_id=user_id,
        read_at=fields.read_at,
        surah_from=fields.surah_from,
        ayah_from=fields.ayah_from,
        surah_to=fields.surah_to,
        ayah_to=fields.ayah_to,
        pages_read=fields.pages_read,
        duration_minutes=fields.duration_minutes,
        notes=fields.notes,
        goal_id=goal.id if goal else None,
        created_at=now,
    )
    stored = existing or db.append_entry(entry)

    if goal is None:
        return LogOutcome(
            entry=stored,
            duplicate=existing is not None,
            goal=None,
            snapshot=None,
            new_achievements=[],
            goal_completed=False,
        )

    was_completed = goal.status == GOAL_COMPLETED
    settled, entries = _settle_goal(db, goal, now)
    snapshot = compute_snapshot(entries, settled, now.date())
    unlocked = [u.key for u in db.list_unlocked_achievements(settled.id)]
    fresh = evaluate_achievements(snapshot, entries, unlocked)
    if fresh:
        db.unlock_achievements(settled.id, fresh, now)
        logger.info("User %s unlocked %s on khatma %s", user_id, ", ".join(fresh), settled.id)

    return LogOutcome(
        entry=stored,
        duplicate=existing is not None,
        goal=settled,
        snapshot=snapshot,
        new_achievements=fresh,
        goal_completed=settled.status == GOAL_COMPLETED and not was_completed,
    )


def pause_khatma(db: Database, user_id: int, goal_id: str) -> KhatmaGoal:
    goal = _load_owned_goal(db, user_id, goal_id)
    return db.save_goal_state(pause_goal(goal))


def resume_khatma(db: Database, user_id: int, goal_id: str) -> KhatmaGoal:
    goal = _load_owned_goal(db, user_id, goal_id)
    return db.save_goal_state(resume_goal(goal))


def reconcile_goals(db: Database, user_id: int, now: datetime) -> list[KhatmaGoal]:
    """Recompute every goal's cached progress from the entry log."""
    return [_settle_goal(db, goal, now)[0] for goal in db.list_goals(user_id)]


def active_goal(db: Database, user_id: int) -> KhatmaGoal | None:
    for goal in db.list_goals(user_id):
        if goal.status != GOAL_COMPLETED:
            return goal
    return None


def goal_view(db: Database, user_id: int, goal_id: str, today: date) -> GoalView:
    goal = _load_owned_goal(db, user_id, goal_id)
    entries = db.load_entries(user_id, goal_id)
    snapshot = compute_snapshot(entries, goal, today)
    unlocked = [u.key for u in db.list_unlocked_achievements(goal_id)]
    return GoalView(
        goal=goal,
        snapshot=snapshot,
        unlocked=merge_unlocked(unlocked, []),
        last_7_days=compute_window(entries, 7, today),
    )


def compute_analytics(db: Database, user_id: int, today: date) -> AnalyticsView:
    entries = db.load_entries(user_id)
    days = reading_days(e for e in entries if entry_day(e.read_at) <= today)
    return AnalyticsView(
        stats=compute_reading_stats(entries),
        current_streak=current_streak(days, today),
        longest_streak=longest_streak(reading_days(entries)),
        favorite_time=compute_favorite_time(entries),
        last_7_days=compute_window(entries, 7, today),
        last_30_days=compute_window(entries, 30, today),
        surah_tally=compute_surah_tally(entries),
        weekly=compute_weekly_totals(entries, today),
        monthly=compute_monthly_totals(entries, today),
        completed_khatmas=db.count_completed_goals(user_id),
    )
