from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from tg_khatma.db_models import ReadingEntry
from tg_khatma.time_utils import DayRange, days_between, entry_day, entry_hour, month_range_for, shift_months, week_range_for

TIME_OF_DAY_ORDER = ("morning", "afternoon", "evening", "night")


@dataclass(frozen=True)
class SurahCount:
    surah: int
    count: int


@dataclass(frozen=True)
class PeriodTotals:
    start: date
    end: date
    pages: int
    minutes: int
    sessions: int


@dataclass(frozen=True)
class ReadingStats:
    total_sessions: int
    total_minutes: int
    total_pages: int
    average_session_minutes: int
    most_read_surah: int | None


def time_of_day(hour: int) -> str:
    if 5 <= hour <= 11:
        return "morning"
    if 12 <= hour <= 16:
        return "afternoon"
    if 17 <= hour <= 20:
        return "evening"
    return "night"


def compute_window(entries: Iterable[ReadingEntry], window_days: int, today: date) -> list[int]:
    """Pages per day for the last *window_days* days; the last slot is *today*."""
    if window_days <= 0:
        return []
    buckets = [0] * window_days
    for e in entries:
        age = days_between(entry_day(e.read_at), today)
        if 0 <= age < window_days:
            buckets[window_days - 1 - age] += e.pages_read
    return buckets


def compute_surah_tally(entries: Iterable[ReadingEntry]) -> list[SurahCount]:
    counts: Counter[int] = Counter()
    for e in entries:
        for surah in range(e.surah_from, e.surah_to + 1):
            counts[surah] += 1
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [SurahCount(surah=surah, count=count) for surah, count in ordered]


def compute_favorite_time(entries: Iterable[ReadingEntry]) -> str:
    counts = Counter(time_of_day(entry_hour(e.read_at)) for e in entries)
    # max() keeps the first of equal counts, so order encodes the tie-break.
    return max(TIME_OF_DAY_ORDER, key=lambda bucket: counts.get(bucket, 0))


def _totals_for(entries: list[ReadingEntry], period: DayRange) -> PeriodTotals:
    inside = [e for e in entries if period.start <= entry_day(e.read_at) < period.end]
    return PeriodTotals(
        start=period.start,
        end=period.end,
        pages=sum(e.pages_read for e in inside),
        minutes=sum(e.duration_minutes for e in inside),
        sessions=len(inside),
    )


def compute_weekly_totals(entries: Iterable[ReadingEntry], today: date, weeks: int = 12) -> list[PeriodTotals]:
    """Monday-start weeks, oldest first, the current week last."""
    items = list(entries)
    current = week_range_for(today)
    periods = []
    for offset in range(weeks - 1, -1, -1):
        periods.append(_totals_for(items, week_range_for(current.start - timedelta(weeks=offset))))
    return periods


def compute_monthly_totals(entries: Iterable[ReadingEntry], today: date, months: int = 6) -> list[PeriodTotals]:
    items = list(entries)
    return [
        _totals_for(items, month_range_for(shift_months(today, -offset)))
        for offset in range(months - 1, -1, -1)
    ]


def compute_reading_stats(entries: Iterable[ReadingEntry]) -> ReadingStats:
    items = list(entries)
    if not items:
        return ReadingStats(0, 0, 0, 0, None)
    total_minutes = sum(e.duration_minutes for e in items)
    tally = compute_surah_tally(items)
    return ReadingStats(
        total_sessions=len(items),
        total_minutes=total_minutes,
        total_pages=sum(e.pages_read for e in items),
        average_session_minutes=round(total_minutes / len(items)),
        most_read_surah=tally[0].surah if tally else None,
    )
