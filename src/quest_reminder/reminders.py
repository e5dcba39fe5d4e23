from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable

from quest_reminder.db import Database, PendingReminder, Quest
from quest_reminder.i18n import t
from quest_reminder.lifecycle import scheduled_day
from quest_reminder.time_utils import now_local

logger = logging.getLogger(__name__)

REMINDER_PREFIX = "quest.reminder."
OVERDUE_DELAY = timedelta(seconds=60)


def reminder_candidates(quests: Iterable[Quest]) -> list[Quest]:
    return [q for q in quests if not q.deleted and not q.archived and not q.completed]


def reminder_trigger(quest: Quest, now: datetime, hour: int = 9) -> datetime:
    trigger = scheduled_day(quest, now).replace(hour=hour)
    if trigger <= now:
        return now + OVERDUE_DELAY
    return trigger


def reminder_id(quest: Quest, now: datetime) -> str:
    day_stamp = int(scheduled_day(quest, now).timestamp())
    return f"{REMINDER_PREFIX}{quest.id}.{day_stamp}"


def plan_reminders(quests: Iterable[Quest], now: datetime, hour: int = 9, lang: str = "en") -> list[PendingReminder]:
    return [
        PendingReminder(
            id=reminder_id(q, now),
            quest_id=q.id,
            title=t("notification_quest_title", lang),
            body=t("notification_quest_body", lang, title=q.title),
            trigger_at=reminder_trigger(q, now, hour),
        )
        for q in reminder_candidates(quests)
    ]


def due_reminders(reminders: Iterable[PendingReminder], now: datetime) -> list[PendingReminder]:
    return [r for r in reminders if r.trigger_at <= now]


class ReminderPlanner:
    """Store listener that keeps the pending reminder table in sync with the quests."""

    def __init__(self, db: Database, tz: str, hour: int = 9) -> None:
        self.db = db
        self.tz = tz
        self.hour = hour

    def refresh(self, quests: list[Quest], now: datetime | None = None) -> list[PendingReminder]:
        current = now or now_local(self.tz)
        reminders = plan_reminders(quests, current, self.hour, self.db.get_language())
        self.db.replace_pending_reminders(reminders)
        logger.debug("planned reminders count=%s", len(reminders))
        return reminders

    def __call__(self, quests: list[Quest]) -> None:
        self.refresh(quests)
