from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from tg_khatma.db_models import KhatmaGoal, ReadingEntry
from tg_khatma.quran_reference import MUSHAF_PAGES
from tg_khatma.time_utils import days_between, entry_day


@dataclass(frozen=True)
class ProgressSnapshot:
    current_page: int
    total_pages: int
    percent_complete: float
    pages_remaining: int
    days_remaining: int
    overdue: bool
    current_streak: int
    longest_streak: int
    average_pages_per_day: float
    daily_target: int
    required_pages_per_day: int
    projected_completion_date: date | None
    total_minutes: int
    sessions: int


def entries_for_goal(entries: Iterable[ReadingEntry], goal: KhatmaGoal | None) -> list[ReadingEntry]:
    if goal is None:
        return list(entries)
    return [e for e in entries if e.goal_id == goal.id]


def reading_days(entries: Iterable[ReadingEntry]) -> set[date]:
    return {entry_day(e.read_at) for e in entries}


def daily_pages(entries: Iterable[ReadingEntry]) -> dict[date, int]:
    totals: dict[date, int] = {}
    for e in entries:
        day = entry_day(e.read_at)
        totals[day] = totals.get(day, 0) + e.pages_read
    return totals


def current_streak(days: set[date], today: date) -> int:
    """Consecutive reading days ending today, or yesterday if today is still unread."""
    if today in days:
        cursor = today
    elif today - timedelta(days=1) in days:
        cursor = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def longest_streak(days: set[date]) -> int:
    longest = 0
    run = 0
    previous: date | None = None
    for day in sorted(days):
        if previous is not None and days_between(previous, day) == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day
    return longest


def days_remaining(target_date: date, today: date) -> tuple[int, bool]:
    """Whole days left until the target date, clamped at zero, plus an overdue flag."""
    remaining = days_between(today, target_date)
    return max(0, remaining), remaining < 0


def compute_snapshot(
    entries: Iterable[ReadingEntry],
    goal: KhatmaGoal | None,
    today: date,
) -> ProgressSnapshot:
    scoped = entries_for_goal(entries, goal)
    total_pages = goal.total_pages if goal is not None else MUSHAF_PAGES

    pages_sum = sum(e.pages_read for e in scoped)
    current_page = min(total_pages, pages_sum) if total_pages > 0 else pages_sum
    if total_pages > 0:
        percent = min(100.0, current_page / total_pages * 100)
    else:
        percent = 0.0
    pages_remaining = max(0, total_pages - current_page)

    if goal is not None:
        remaining_days, past_target = days_remaining(goal.target_date, today)
        overdue = past_target and pages_remaining > 0
        start = goal.start_date
        daily_target = goal.daily_target
    else:
        remaining_days, overdue = 0, False
        start = min((entry_day(e.read_at) for e in scoped), default=today)
        daily_target = 0

    average = current_page / max(1, days_between(start, today))

    if remaining_days > 0:
        required = math.ceil(pages_remaining / remaining_days)
    else:
        required = pages_remaining

    projected: date | None = None
    if pages_remaining == 0 and scoped:
        projected = today
    elif average > 0:
        projected = today + timedelta(days=math.ceil(pages_remaining / average))

    days = reading_days(scoped)
    return ProgressSnapshot(
        current_page=current_page,
        total_pages=total_pages,
        percent_complete=percent,
        pages_remaining=pages_remaining,
        days_remaining=remaining_days,
        overdue=overdue,
        current_streak=current_streak(days, today),
        longest_streak=longest_streak(days),
        average_pages_per_day=average,
        daily_target=daily_target,
        required_pages_per_day=required,
        projected_completion_date=projected,
        total_minutes=sum(e.duration_minutes for e in scoped),
        sessions=len(scoped),
    )
