from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

GOAL_ACTIVE = "active"
GOAL_PAUSED = "paused"
GOAL_COMPLETED = "completed"


@dataclass(frozen=True)
class ReadingEntry:
    id: str
    user_id: int
    read_at: datetime
    surah_from: int
    ayah_from: int
    surah_to: int
    ayah_to: int
    pages_read: int
    duration_minutes: int
    notes: str | None
    goal_id: str | None
    created_at: datetime


@dataclass(frozen=True)
class KhatmaGoal:
    id: str
    user_id: int
    name: str
    start_date: date
    target_date: date
    total_pages: int
    daily_target: int
    status: str
    current_progress_pages: int
    created_at: datetime
    completed_at: datetime | None


@dataclass(frozen=True)
class UnlockedAchievement:
    goal_id: str
    key: str
    unlocked_at: datetime
