from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date

from tg_khatma.db_models import ReadingEntry
from tg_khatma.progress import ProgressSnapshot, daily_pages
from tg_khatma.time_utils import entry_day, entry_hour

SPEED_READER_PAGES = 20
WEEK_STREAK_DAYS = 7
MONTH_STREAK_DAYS = 30
CONSISTENT_DAYS = 10
DEDICATED_MINUTES = 100 * 60
FOCUSED_SURAHS = 5
REFLECTION_NOTES = 50


@dataclass(frozen=True)
class AchievementContext:
    snapshot: ProgressSnapshot
    entries: tuple[ReadingEntry, ...]

    def pages_by_day(self) -> dict[date, int]:
        return daily_pages(self.entries)


@dataclass(frozen=True)
class Achievement:
    key: str
    name: str
    icon: str
    description: str
    predicate: Callable[[AchievementContext], bool]


def _halfway(ctx: AchievementContext) -> bool:
    s = ctx.snapshot
    return s.total_pages > 0 and s.current_page >= s.total_pages / 2


def _completion(ctx: AchievementContext) -> bool:
    s = ctx.snapshot
    return s.total_pages > 0 and s.current_page >= s.total_pages


def _speed_reader(ctx: AchievementContext) -> bool:
    return any(pages >= SPEED_READER_PAGES for pages in ctx.pages_by_day().values())


def _consistent(ctx: AchievementContext) -> bool:
    target = ctx.snapshot.daily_target
    if target <= 0:
        return False
    met = sum(1 for pages in ctx.pages_by_day().values() if pages >= target)
    return met >= CONSISTENT_DAYS


def _focused(ctx: AchievementContext) -> bool:
    surahs_by_day: dict[date, set[int]] = {}
    for e in ctx.entries:
        surahs_by_day.setdefault(entry_day(e.read_at), set()).update(range(e.surah_from, e.surah_to + 1))
    return any(len(touched) >= FOCUSED_SURAHS for touched in surahs_by_day.values())


CATALOG: tuple[Achievement, ...] = (
    Achievement("first_page", "First Steps", "👶", "Read your first page",
                lambda ctx: ctx.snapshot.current_page >= 1),
    Achievement("week_streak", "Weekly Warrior", "🔥", "7 days reading streak",
                lambda ctx: ctx.snapshot.current_streak >= WEEK_STREAK_DAYS),
    Achievement("month_streak", "Monthly Master", "⭐", "30 days reading streak",
                lambda ctx: ctx.snapshot.current_streak >= MONTH_STREAK_DAYS),
    Achievement("early_bird", "Early Bird", "🌅", "Read before 9 AM",
                lambda ctx: any(5 <= entry_hour(e.read_at) < 9 for e in ctx.entries)),
    Achievement("night_owl", "Night Owl", "🌙", "Read after 9 PM",
                lambda ctx: any(entry_hour(e.read_at) >= 21 for e in ctx.entries)),
    Achievement("speed_reader", "Speed Reader", "⚡", "Read 20 pages in one day", _speed_reader),
    Achievement("consistent", "Consistency King", "👑", "Meet daily goal for 10 days", _consistent),
    Achievement("halfway", "Halfway Hero", "🎯", "Complete 50% of the Khatma", _halfway),
    Achievement("completion", "Khatma Complete", "🏆", "Complete the entire Khatma", _completion),
    Achievement("dedicated", "Dedicated Reader", "📚", "Read for 100 hours total",
                lambda ctx: sum(e.duration_minutes for e in ctx.entries) >= DEDICATED_MINUTES),
    Achievement("focused", "Focused Mind", "🧠", "Read from 5 surahs in one day", _focused),
    Achievement("reflection", "Deep Thinker", "💭", "Add reflection notes to 50 readings",
                lambda ctx: sum(1 for e in ctx.entries if e.notes) >= REFLECTION_NOTES),
)

CATALOG_BY_KEY: dict[str, Achievement] = {a.key: a for a in CATALOG}


def evaluate_achievements(
    snapshot: ProgressSnapshot,
    entries: Iterable[ReadingEntry],
    unlocked: Iterable[str],
) -> list[str]:
    """Return keys that unlock now and are not already in *unlocked*.

    Keys already unlocked are never re-checked, so a shorter history cannot
    revoke them; persisting the union is up to the caller.
    """
    already = set(unlocked)
    ctx = AchievementContext(snapshot=snapshot, entries=tuple(entries))
    return [a.key for a in CATALOG if a.key not in already and a.predicate(ctx)]


def merge_unlocked(unlocked: Iterable[str], new_keys: Iterable[str]) -> list[str]:
    """Union in catalog order; unknown keys from older catalogs are kept at the end."""
    keys = set(unlocked) | set(new_keys)
    ordered = [a.key for a in CATALOG if a.key in keys]
    ordered.extend(sorted(keys - set(ordered)))
    return ordered
