from __future__ import annotations

from tg_khatma.db_models import GOAL_ACTIVE, GOAL_COMPLETED, GOAL_PAUSED, KhatmaGoal, ReadingEntry, UnlockedAchievement
from tg_khatma.db_repo import BaseDatabase, EntryMixin, GoalMixin


class Database(EntryMixin, GoalMixin, BaseDatabase):
    pass


__all__ = [
    "Database",
    "GOAL_ACTIVE",
    "GOAL_COMPLETED",
    "GOAL_PAUSED",
    "KhatmaGoal",
    "ReadingEntry",
    "UnlockedAchievement",
]
