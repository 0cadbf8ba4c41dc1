from .base import BaseDatabase
from .entries import EntryMixin
from .goals import GoalMixin

__all__ = [
    "BaseDatabase",
    "EntryMixin",
    "GoalMixin",
]
