from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Any

from quest_reminder.db_models import PendingReminder, Quest, StreakState


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _format_ts(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _row_to_quest(row: sqlite3.Row) -> Quest:
    return Quest(
        id=str(row["id"]),
        title=str(row["title"]),
        quest_type=str(row["quest_type"]),
        notes=row["notes"] or "",
        scheduled_date=_parse_ts(row["scheduled_date"]),
        recurrence=row["recurrence"] or "none",
        icon=row["icon"] or "flame",
        completed=bool(row["completed"]),
        archived=bool(row["archived"]),
        deleted=bool(row["deleted"]),
        completed_at=_parse_ts(row["completed_at"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _quest_to_params(quest: Quest, position: int) -> tuple[Any, ...]:
    return (
        quest.id,
        position,
        quest.title,
        quest.quest_type,
        quest.notes,
        _format_ts(quest.scheduled_date),
        quest.recurrence,
        quest.icon,
        1 if quest.completed else 0,
        1 if quest.archived else 0,
        1 if quest.deleted else 0,
        _format_ts(quest.completed_at),
        quest.created_at.isoformat(),
    )


def _row_to_streak_state(row: sqlite3.Row) -> StreakState:
    rollback_key = row["rollback_period_key"]
    return StreakState(
        period=str(row["period"]),
        current_streak=max(0, int(row["current_streak"])),
        last_completion=_parse_ts(row["last_completion"]),
        rollback_period_key=int(rollback_key) if rollback_key is not None else None,
        rollback_streak=int(row["rollback_streak"]),
        rollback_last_completion=_parse_ts(row["rollback_last_completion"]),
    )


def _streak_state_to_params(state: StreakState, updated_at: datetime) -> tuple[Any, ...]:
    return (
        state.period,
        state.current_streak,
        _format_ts(state.last_completion),
        state.rollback_period_key,
        state.rollback_streak,
        _format_ts(state.rollback_last_completion),
        updated_at.isoformat(),
    )


def _row_to_reminder(row: sqlite3.Row) -> PendingReminder:
    return PendingReminder(
        id=str(row["id"]),
        quest_id=str(row["quest_id"]),
        title=str(row["title"]),
        body=str(row["body"]),
        trigger_at=datetime.fromisoformat(row["trigger_at"]),
    )
