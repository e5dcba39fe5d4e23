from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

QUEST_TYPES: tuple[str, ...] = ("daily", "weekly")
RECURRENCES: tuple[str, ...] = ("none", "daily", "weekly")
ICONS: tuple[str, ...] = ("flame", "star", "bolt", "book", "dumbbell", "heart", "leaf", "trophy")

DEFAULT_RECURRENCE = "none"
DEFAULT_ICON = "flame"

@dataclass(frozen=True)
class Quest:
    id: str
    title: str
    quest_type: str
    notes: str
    scheduled_date: datetime | None
    recurrence: str
    icon: str
    completed: bool
    archived: bool
    deleted: bool
    completed_at: datetime | None
    created_at: datetime

@dataclass(frozen=True)
class StreakState:
    period: str
    current_streak: int = 0
    last_completion: datetime | None = None
    rollback_period_key: int | None = None
    rollback_streak: int = 0
    rollback_last_completion: datetime | None = None

@dataclass(frozen=True)
class PendingReminder:
    id: str
    quest_id: str
    title: str
    body: str
    trigger_at: datetime
