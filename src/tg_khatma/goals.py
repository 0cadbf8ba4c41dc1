from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import replace
from datetime import date, datetime

from tg_khatma.db_models import GOAL_ACTIVE, GOAL_COMPLETED, GOAL_PAUSED, KhatmaGoal, ReadingEntry
from tg_khatma.errors import GOAL_COMPLETED as GOAL_COMPLETED_ERROR
from tg_khatma.errors import GOAL_NOT_FOUND, INVALID_TRANSITION, GoalStateError
from tg_khatma.quran_reference import MUSHAF_PAGES
from tg_khatma.time_utils import days_between
from tg_khatma.validation import validate_goal


def daily_target_for(total_pages: int, start_date: date, target_date: date) -> int:
    days = max(1, days_between(start_date, target_date))
    return max(1, math.ceil(total_pages / days))


def new_goal(
    goal_id: str,
    user_id: int,
    name: str,
    start_date: date,
    target_date: date,
    created_at: datetime,
    total_pages: int = MUSHAF_PAGES,
    daily_target: int | None = None,
) -> KhatmaGoal:
    validate_goal(name, start_date, target_date, total_pages, daily_target)
    return KhatmaGoal(
        id=goal_id,
        user_id=user_id,
        name=name.strip(),
        start_date=start_date,
        target_date=target_date,
        total_pages=total_pages,
        daily_target=daily_target if daily_target is not None else daily_target_for(total_pages, start_date, target_date),
        status=GOAL_ACTIVE,
        current_progress_pages=0,
        created_at=created_at,
        completed_at=None,
    )


def pause_goal(goal: KhatmaGoal) -> KhatmaGoal:
    if goal.status != GOAL_ACTIVE:
        raise GoalStateError(INVALID_TRANSITION, goal.id, f"Cannot pause a {goal.status} goal")
    return replace(goal, status=GOAL_PAUSED)


def resume_goal(goal: KhatmaGoal) -> KhatmaGoal:
    if goal.status != GOAL_PAUSED:
        raise GoalStateError(INVALID_TRANSITION, goal.id, f"Cannot resume a {goal.status} goal")
    return replace(goal, status=GOAL_ACTIVE)


def progress_pages(goal: KhatmaGoal, entries: Iterable[ReadingEntry]) -> int:
    return sum(e.pages_read for e in entries if e.goal_id == goal.id)


def apply_progress(goal: KhatmaGoal, entries: Iterable[ReadingEntry], now: datetime) -> KhatmaGoal:
    """Rebuild the cached page total from the log and complete the goal when it is reached."""
    pages = progress_pages(goal, entries)
    updated = goal
    if pages != goal.current_progress_pages:
        updated = replace(updated, current_progress_pages=pages)
    if updated.status != GOAL_COMPLETED and pages >= updated.total_pages:
        updated = replace(updated, status=GOAL_COMPLETED, completed_at=now)
    return updated


def ensure_accepts_entries(goal: KhatmaGoal | None, goal_id: str) -> KhatmaGoal:
    if goal is None:
        raise GoalStateError(GOAL_NOT_FOUND, goal_id, f"Khatma goal {goal_id} does not exist")
    if goal.status == GOAL_COMPLETED:
        raise GoalStateError(GOAL_COMPLETED_ERROR, goal_id, f"Khatma goal {goal.name!r} is already completed")
    return goal
