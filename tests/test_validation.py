from __future__ import annotations

from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from tg_khatma.errors import EntryValidationError
from tg_khatma.validation import validate_entry, validate_goal


def _dt(y: int, m: int, d: int, h: int = 10, minute: int = 0) -> datetime:
    return datetime(y, m, d, h, minute, tzinfo=ZoneInfo("Asia/Riyadh"))


def _entry_kwargs(**overrides: Any) -> dict[str, Any]:
    base: dict[str, Any] = {
        "read_at": _dt(2026, 3, 1),
        "surah_from": 2,
        "ayah_from": 1,
        "surah_to": 2,
        "ayah_to": 20,
        "pages_read": 3,
        "duration_minutes": 15,
    }
    base.update(overrides)
    return base


def test_valid_entry_passes_through() -> None:
    fields = validate_entry(**_entry_kwargs(notes="  reflect on 2:2  "))
    assert fields.pages_read == 3
    assert fields.notes == "reflect on 2:2"


def test_blank_notes_become_none() -> None:
    assert validate_entry(**_entry_kwargs(notes="   ")).notes is None


def test_entry_spanning_surahs_allows_lower_end_ayah() -> None:
    fields = validate_entry(**_entry_kwargs(surah_from=2, ayah_from=250, surah_to=3, ayah_to=5))
    assert (fields.surah_from, fields.ayah_to) == (2, 5)


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"pages_read": 0}, "pages_read"),
        ({"pages_read": -1}, "pages_read"),
        ({"pages_read": 605}, "pages_read"),
        ({"pages_read": 2.5}, "pages_read"),
        ({"pages_read": True}, "pages_read"),
        ({"duration_minutes": 0}, "duration_minutes"),
        ({"surah_from": 0}, "surah_from"),
        ({"surah_to": 115}, "surah_to"),
        ({"surah_from": 3, "surah_to": 2}, "surah_from"),
        ({"ayah_to": 287}, "ayah_to"),
        ({"ayah_from": 0}, "ayah_from"),
        ({"ayah_from": 30, "ayah_to": 20}, "ayah_from"),
        ({"read_at": "2026-03-01"}, "read_at"),
    ],
)
def test_invalid_entries_name_the_field(overrides: dict[str, Any], field: str) -> None:
    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry(**_entry_kwargs(**overrides))
    assert exc_info.value.field == field


def test_read_at_may_not_be_after_the_current_day() -> None:
    latest = _dt(2026, 3, 1, 8)
    assert validate_entry(**_entry_kwargs(read_at=_dt(2026, 3, 1, 23)), latest=latest).read_at.day == 1
    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry(**_entry_kwargs(read_at=_dt(2026, 3, 2, 0, 5)), latest=latest)
    assert exc_info.value.field == "read_at"


def test_validation_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        validate_entry(**_entry_kwargs(pages_read=0))


def test_valid_goal() -> None:
    validate_goal("Ramadan", date(2026, 2, 18), date(2026, 3, 19), 604)
    validate_goal("Same day", date(2026, 2, 18), date(2026, 2, 18), 1, daily_target=1)


@pytest.mark.parametrize(
    "args,field",
    [
        (("", date(2026, 1, 1), date(2026, 2, 1), 604, None), "name"),
        (("x", date(2026, 2, 1), date(2026, 1, 1), 604, None), "target_date"),
        (("x", datetime(2026, 1, 1), date(2026, 2, 1), 604, None), "start_date"),
        (("x", date(2026, 1, 1), date(2026, 2, 1), 0, None), "total_pages"),
        (("x", date(2026, 1, 1), date(2026, 2, 1), 605, None), "total_pages"),
        (("x", date(2026, 1, 1), date(2026, 2, 1), 604, 0), "daily_target"),
    ],
)
def test_invalid_goals(args: tuple, field: str) -> None:
    with pytest.raises(EntryValidationError) as exc_info:
        validate_goal(*args)
    assert exc_info.value.field == field
