from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo


DEFAULT_TZ = "UTC"


def now_local(tz_name: str = DEFAULT_TZ) -> datetime:
    return datetime.now(tz=ZoneInfo(tz_name))


def entry_day(dt: datetime) -> date:
    """Calendar day of a reading, in the wall-clock zone it was recorded in."""
    return dt.date()


def entry_hour(dt: datetime) -> int:
    return dt.hour


@dataclass(frozen=True)
class DayRange:
    start: date
    end: date  # exclusive


def week_range_for(day: date) -> DayRange:
    start = day - timedelta(days=day.weekday())
    return DayRange(start=start, end=start + timedelta(days=7))


def month_range_for(day: date) -> DayRange:
    start = day.replace(day=1)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return DayRange(start=start, end=end)


def shift_months(day: date, months: int) -> date:
    """First day of the month *months* away from the month of *day*."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def days_between(start: date, end: date) -> int:
    return (end - start).days
