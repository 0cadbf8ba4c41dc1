from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from tg_khatma.errors import EntryValidationError
from tg_khatma.quran_reference import MUSHAF_PAGES, QuranReference, default_reference
from tg_khatma.time_utils import entry_day


@dataclass(frozen=True)
class EntryFields:
    read_at: datetime
    surah_from: int
    ayah_from: int
    surah_to: int
    ayah_to: int
    pages_read: int
    duration_minutes: int
    notes: str | None


def _require_int(field: str, value: Any) -> int:
    # bool is an int subclass; a checkbox value is not a page count.
    if isinstance(value, bool) or not isinstance(value, int):
        raise EntryValidationError(field, "must be an integer")
    return value


def _require_range(field: str, value: Any, low: int, high: int) -> int:
    number = _require_int(field, value)
    if not low <= number <= high:
        raise EntryValidationError(field, f"must be between {low} and {high}")
    return number


def clean_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    if not isinstance(notes, str):
        raise EntryValidationError("notes", "must be text")
    stripped = notes.strip()
    return stripped or None


def validate_entry(
    read_at: Any,
    surah_from: Any,
    ayah_from: Any,
    surah_to: Any,
    ayah_to: Any,
    pages_read: Any,
    duration_minutes: Any,
    notes: Any = None,
    reference: QuranReference | None = None,
    latest: datetime | None = None,
) -> EntryFields:
    ref = reference or default_reference()
    surah_count = len(ref)

    if not isinstance(read_at, datetime):
        raise EntryValidationError("read_at", "must be a datetime")
    if latest is not None and entry_day(read_at) > entry_day(latest):
        raise EntryValidationError("read_at", f"cannot be after {entry_day(latest).isoformat()}")

    pages = _require_int("pages_read", pages_read)
    if pages <= 0:
        raise EntryValidationError("pages_read", "must be positive")
    if pages > ref.total_pages:
        raise EntryValidationError("pages_read", f"cannot exceed {ref.total_pages} pages")

    minutes = _require_int("duration_minutes", duration_minutes)
    if minutes <= 0:
        raise EntryValidationError("duration_minutes", "must be positive")

    s_from = _require_range("surah_from", surah_from, 1, surah_count)
    s_to = _require_range("surah_to", surah_to, 1, surah_count)
    if s_from > s_to:
        raise EntryValidationError("surah_from", "must not be after surah_to")

    a_from = _require_range("ayah_from", ayah_from, 1, ref.ayah_count(s_from))
    a_to = _require_range("ayah_to", ayah_to, 1, ref.ayah_count(s_to))
    if s_from == s_to and a_from > a_to:
        raise EntryValidationError("ayah_from", "must not be after ayah_to within one surah")

    return EntryFields(
        read_at=read_at,
        surah_from=s_from,
        ayah_from=a_from,
        surah_to=s_to,
        ayah_to=a_to,
        pages_read=pages,
        duration_minutes=minutes,
        notes=clean_notes(notes),
    )


def validate_goal(
    name: Any,
    start_date: Any,
    target_date: Any,
    total_pages: Any,
    daily_target: Any = None,
) -> None:
    if not isinstance(name, str) or not name.strip():
        raise EntryValidationError("name", "is required")
    # datetime is a date subclass; goals are planned in whole days.
    if not isinstance(start_date, date) or isinstance(start_date, datetime):
        raise EntryValidationError("start_date", "must be a date")
    if not isinstance(target_date, date) or isinstance(target_date, datetime):
        raise EntryValidationError("target_date", "must be a date")
    if target_date < start_date:
        raise EntryValidationError("target_date", "must not be before start_date")
    _require_range("total_pages", total_pages, 1, MUSHAF_PAGES)
    if daily_target is not None:
        target = _require_int("daily_target", daily_target)
        if target <= 0:
            raise EntryValidationError("daily_target", "must be positive")
