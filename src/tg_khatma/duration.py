from __future__ import annotations

import re

# 1.5h, 1h20m, 25m, or bare minutes like 45
READING_DURATION = re.compile(r"(?:(?P<hours>\d+(?:\.\d+)?)h)?(?:(?P<minutes>\d+)m?)?")


class DurationParseError(ValueError):
    pass


def parse_duration_to_minutes(raw: str) -> int:
    match = READING_DURATION.fullmatch(raw.strip().lower())
    if not match or not any(match.groupdict().values()):
        raise DurationParseError("Invalid duration format. Examples: 25m, 1.5h, 1h20m, 45")

    hours = float(match["hours"] or 0)
    total = int(round(hours * 60)) + int(match["minutes"] or 0)
    if total <= 0:
        raise DurationParseError("Reading duration must be positive")
    return total


def format_minutes_hm(minutes: int) -> str:
    hours, rest = divmod(max(0, minutes), 60)
    if hours and rest:
        return f"{hours}h {rest}m"
    if hours:
        return f"{hours}h"
    return f"{rest}m"
