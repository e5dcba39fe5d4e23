from .base import BaseDatabase
from .quests import QuestMixin
from .streaks import StreakMixin
from .system import SystemMixin

__all__ = [
    "BaseDatabase",
    "QuestMixin",
    "StreakMixin",
    "SystemMixin",
]
