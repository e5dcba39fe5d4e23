from __future__ import annotations

import logging
import sqlite3
import uuid
from dataclasses import dataclass, replace
from datetime import datetime

from quest_reminder.db_models import (
    DEFAULT_ICON,
    DEFAULT_RECURRENCE,
    ICONS,
    QUEST_TYPES,
    RECURRENCES,
    Quest,
    StreakState,
)
from quest_reminder.entitlements import EntitlementGate, apply_gate
from quest_reminder.errors import ValidationError
from quest_reminder.store import QuestStore
from quest_reminder.streaks import already_counted, handle_streak, rollback_if_needed, validate_on_resume
from quest_reminder.time_utils import add_days, days_between, same_iso_week, start_of_day

logger = logging.getLogger(__name__)

RESCHEDULE_STEP_DAYS = {"daily": 1, "weekly": 7}


@dataclass(frozen=True)
class QuestDraft:
    title: str
    quest_type: str = "daily"
    notes: str = ""
    scheduled_date: datetime | None = None
    recurrence: str = DEFAULT_RECURRENCE
    icon: str = DEFAULT_ICON


@dataclass(frozen=True)
class ToggleOutcome:
    quest: Quest
    streak: StreakState
    celebrate: bool
    rescheduled: bool


@dataclass(frozen=True)
class ResumeOutcome:
    archived: list[Quest]
    streaks: dict[str, StreakState]


def scheduled_day(quest: Quest, now: datetime) -> datetime:
    if quest.scheduled_date is None:
        return start_of_day(now)
    return start_of_day(quest.scheduled_date.astimezone(now.tzinfo))


def is_due_for_home(quest: Quest, now: datetime) -> bool:
    return scheduled_day(quest, now) <= start_of_day(now)


def is_stale_completion(quest: Quest, now: datetime) -> bool:
    if not quest.completed or quest.completed_at is None:
        return False
    completed_at = quest.completed_at.astimezone(now.tzinfo)
    if quest.quest_type == "weekly":
        return not same_iso_week(completed_at, now)
    return days_between(completed_at, now) >= 1


class QuestTracker:
    """Coordinates quest mutations with streak bookkeeping and archiving."""

    def __init__(self, store: QuestStore, gate: EntitlementGate | None = None) -> None:
        self.store = store
        self.db = store.db
        self.gate = gate or EntitlementGate()
        self._streaks = self._load_streaks()

    @property
    def streaks(self) -> dict[str, StreakState]:
        return dict(self._streaks)

    def streak(self, period: str) -> StreakState:
        return self._streaks[period]

    # -- queries ---------------------------------------------------------

    def due_quests(self, quest_type: str, now: datetime) -> list[Quest]:
        return [
            q
            for q in self.store.quests
            if q.quest_type == quest_type and not q.deleted and not q.archived and is_due_for_home(q, now)
        ]

    def home_quests(self, quest_type: str, now: datetime) -> list[Quest]:
        return sorted(self.due_quests(quest_type, now), key=lambda q: q.completed)

    def is_fully_completed(self, quest_type: str, now: datetime) -> bool:
        due = self.due_quests(quest_type, now)
        return bool(due) and all(q.completed for q in due)

    def progress(self, quest_type: str, now: datetime) -> float:
        due = self.due_quests(quest_type, now)
        if not due:
            return 0.0
        return sum(1 for q in due if q.completed) / len(due)

    # -- upsert ----------------------------------------------------------

    def add_quest(self, draft: QuestDraft, now: datetime) -> Quest:
        fields = self._normalize_draft(draft, now)
        quest = Quest(
            id=str(uuid.uuid4()),
            completed=False,
            archived=False,
            deleted=False,
            completed_at=None,
            created_at=now,
            **fields,
        )
        self.store.add(quest)
        logger.info("quest added id=%s type=%s", quest.id, quest.quest_type)
        return quest

    def edit_quest(self, quest_id: str, draft: QuestDraft, now: datetime) -> Quest | None:
        existing = self.store.get(quest_id)
        if existing is None or existing.deleted:
            return None
        fields = self._normalize_draft(draft, now)
        updated = replace(existing, **fields)
        if updated.quest_type != existing.quest_type:
            updated = replace(updated, completed=False, completed_at=None, archived=False)
        self.store.update(updated)
        return updated

    def _normalize_draft(self, draft: QuestDraft, now: datetime) -> dict[str, object]:
        title = draft.title.strip()
        if not title:
            raise ValidationError("Quest title must not be empty.")
        if draft.quest_type not in QUEST_TYPES:
            raise ValidationError(f"Unknown quest type: {draft.quest_type}")
        if draft.recurrence not in RECURRENCES:
            raise ValidationError(f"Unknown recurrence: {draft.recurrence}")
        if draft.icon not in ICONS:
            raise ValidationError(f"Unknown icon: {draft.icon}")

        if draft.scheduled_date is None:
            scheduled = start_of_day(now)
        else:
            scheduled = start_of_day(draft.scheduled_date.astimezone(now.tzinfo))
        recurrence, icon = apply_gate(draft.recurrence, draft.icon, self.gate)
        return {
            "title": title,
            "quest_type": draft.quest_type,
            "notes": draft.notes.strip(),
            "scheduled_date": scheduled,
            "recurrence": recurrence,
            "icon": icon,
        }

    # -- lifecycle -------------------------------------------------------

    def toggle_quest(self, quest_id: str, now: datetime) -> ToggleOutcome | None:
        quest = self.store.toggle(quest_id, now)
        if quest is None:
            return None

        period = quest.quest_type
        before = self._streaks[period]
        state = before
        celebrate = False
        if self.is_fully_completed(period, now):
            if not already_counted(state, now):
                state = handle_streak(state, now)
                celebrate = True
        else:
            state = rollback_if_needed(state, now)

        if state != before:
            self._streaks[period] = state
            self._save_streaks(now)
            logger.info("streak %s: %s -> %s", period, before.current_streak, state.current_streak)

        rescheduled = False
        if quest.completed and quest.recurrence != "none":
            quest = self.auto_reschedule(quest, now)
            rescheduled = True

        return ToggleOutcome(quest=quest, streak=state, celebrate=celebrate, rescheduled=rescheduled)

    def auto_reschedule(self, quest: Quest, now: datetime) -> Quest:
        base = max(scheduled_day(quest, now), start_of_day(now))
        step = RESCHEDULE_STEP_DAYS.get(quest.recurrence, 1)
        updated = replace(
            quest,
            scheduled_date=add_days(base, step),
            completed=False,
            completed_at=None,
            archived=False,
        )
        self.store.update(updated)
        return updated

    def archive_sweep(self, now: datetime) -> list[Quest]:
        stale = [
            q.id
            for q in self.store.quests
            if not q.deleted and not q.archived and is_stale_completion(q, now)
        ]
        return self.store.archive(stale)

    def resume(self, now: datetime) -> ResumeOutcome:
        validated = {period: validate_on_resume(state, now) for period, state in self._streaks.items()}
        if validated != self._streaks:
            self._streaks = validated
            self._save_streaks(now)

        archived = self.archive_sweep(now)
        if not archived:
            self.store.force_save()
        return ResumeOutcome(archived=archived, streaks=self.streaks)

    # -- delete / restore ------------------------------------------------

    def delete_quest(self, quest_id: str) -> None:
        self.store.mark_deleted(quest_id)

    def restore_quest(self, quest_id: str) -> None:
        self.store.restore_deleted(quest_id)

    def purge_quest(self, quest_id: str) -> None:
        self.store.purge(quest_id)

    def restore_archived(self, quest_id: str) -> Quest | None:
        quest = self.store.get(quest_id)
        if quest is None or not quest.archived:
            return None
        restored = replace(quest, archived=False, completed=False, completed_at=None)
        self.store.update(restored)
        return restored

    # -- persistence -----------------------------------------------------

    def _load_streaks(self) -> dict[str, StreakState]:
        try:
            return self.db.load_streak_states()
        except (sqlite3.Error, ValueError):
            logger.exception("streak state load failed, using defaults")
            return {period: StreakState(period=period) for period in QUEST_TYPES}

    def _save_streaks(self, now: datetime) -> None:
        try:
            self.db.save_streak_states(self._streaks, now)
        except sqlite3.Error:
            logger.exception("streak state save failed")
