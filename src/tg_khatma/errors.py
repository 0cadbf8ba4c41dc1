from __future__ import annotations


class KhatmaError(Exception):
    pass


class EntryValidationError(KhatmaError, ValueError):
    """A record failed field validation before it reached the store."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


GOAL_NOT_FOUND = "goal_not_found"
GOAL_COMPLETED = "goal_completed"
INVALID_TRANSITION = "invalid_transition"


class GoalStateError(KhatmaError):
    def __init__(self, kind: str, goal_id: str | None, message: str | None = None) -> None:
        super().__init__(message or f"{kind}: {goal_id}")
        self.kind = kind
        self.goal_id = goal_id


class ReferenceDataError(KhatmaError, ValueError):
    pass


ENTRY_ID_CONFLICT = "entry_id_conflict"


class EntryConflictError(KhatmaError):
    """An entry id is already taken by another user's reading."""

    kind = ENTRY_ID_CONFLICT

    def __init__(self, entry_id: str) -> None:
        super().__init__(f"{ENTRY_ID_CONFLICT}: {entry_id}")
        self.entry_id = entry_id
