from __future__ import annotations

from quest_reminder.db_models import PendingReminder, Quest, StreakState
from quest_reminder.db_repo import BaseDatabase, QuestMixin, StreakMixin, SystemMixin

__all__ = ["Database", "PendingReminder", "Quest", "StreakState"]


class Database(QuestMixin, StreakMixin, SystemMixin, BaseDatabase):
    pass
