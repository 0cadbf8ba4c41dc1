import pytest

from tg_khatma.duration import DurationParseError, format_minutes_hm, parse_duration_to_minutes


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("25m", 25),
        ("1.5h", 90),
        ("1h20m", 80),
        ("45", 45),
        ("2h", 120),
        ("1h20", 80),
        (" 25M ", 25),
    ],
)
def test_parse_duration_valid(raw: str, expected: int) -> None:
    assert parse_duration_to_minutes(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "0", "-10", "1 h", "1m20h", "h", "0m", "0h0m", "1.5m"])
def test_parse_duration_invalid(raw: str) -> None:
    with pytest.raises(DurationParseError):
        parse_duration_to_minutes(raw)


@pytest.mark.parametrize("minutes,expected", [(0, "0m"), (45, "45m"), (60, "1h"), (95, "1h 35m")])
def test_format_minutes_hm(minutes: int, expected: str) -> None:
    assert format_minutes_hm(minutes) == expected
