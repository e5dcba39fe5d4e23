from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable

from quest_reminder.db import Database, Quest

logger = logging.getLogger(__name__)

QuestListener = Callable[[list[Quest]], None]


class QuestStore:
    """In-memory quest collection, written through to the database on every change.

    Lookups by an unknown id are silent no-ops: callers only reference ids they
    have just listed. Trashed quests cannot be toggled.
    """

    def __init__(self, db: Database) -> None:
        self.db = db
        self._quests: list[Quest] = []
        self._listeners: list[QuestListener] = []
        self._load()

    @property
    def quests(self) -> list[Quest]:
        return list(self._quests)

    def subscribe(self, listener: QuestListener) -> None:
        self._listeners.append(listener)
        self._notify_one(listener)

    def get(self, quest_id: str) -> Quest | None:
        for quest in self._quests:
            if quest.id == quest_id:
                return quest
        return None

    def find(self, ref: str, include_deleted: bool = True) -> Quest | None:
        ref = ref.strip().lower()
        if not ref:
            return None
        pool = self._quests if include_deleted else [q for q in self._quests if not q.deleted]
        for quest in pool:
            if quest.id == ref:
                return quest
        matches = [q for q in pool if q.id.startswith(ref)]
        return matches[0] if len(matches) == 1 else None

    def active(self) -> list[Quest]:
        return [q for q in self._quests if not q.deleted and not q.archived]

    def archived(self) -> list[Quest]:
        return [q for q in self._quests if q.archived and not q.deleted]

    def trash(self) -> list[Quest]:
        return [q for q in self._quests if q.deleted]

    def add(self, quest: Quest) -> None:
        self._quests.append(quest)
        self._save()

    def update(self, quest: Quest) -> None:
        idx = self._index(quest.id)
        if idx is None:
            return
        self._quests[idx] = quest
        self._save()

    def toggle(self, quest_id: str, now: datetime) -> Quest | None:
        idx = self._index(quest_id)
        if idx is None:
            return None
        quest = self._quests[idx]
        if quest.deleted:
            return None
        if quest.completed:
            updated = replace(quest, completed=False, completed_at=None, archived=False)
        else:
            updated = replace(quest, completed=True, completed_at=now)
        self._quests[idx] = updated
        self._save()
        return updated

    def mark_deleted(self, quest_id: str) -> None:
        idx = self._index(quest_id)
        if idx is None:
            return
        self._quests[idx] = replace(
            self._quests[idx],
            deleted=True,
            archived=False,
            completed=False,
            completed_at=None,
        )
        self._save()

    def restore_deleted(self, quest_id: str) -> None:
        idx = self._index(quest_id)
        if idx is None:
            return
        self._quests[idx] = replace(self._quests[idx], deleted=False)
        self._save()

    def purge(self, quest_id: str) -> None:
        before = len(self._quests)
        self._quests = [q for q in self._quests if q.id != quest_id]
        if len(self._quests) != before:
            self._save()

    def archive(self, quest_ids: Iterable[str]) -> list[Quest]:
        wanted = set(quest_ids)
        archived: list[Quest] = []
        for idx, quest in enumerate(self._quests):
            if quest.id not in wanted or quest.archived or quest.deleted or not quest.completed:
                continue
            updated = replace(quest, archived=True)
            self._quests[idx] = updated
            archived.append(updated)
        if archived:
            self._save()
        return archived

    def force_save(self) -> None:
        self._save()

    def _index(self, quest_id: str) -> int | None:
        for idx, quest in enumerate(self._quests):
            if quest.id == quest_id:
                return idx
        return None

    def _load(self) -> None:
        try:
            self._quests = self.db.load_quests()
        except (sqlite3.Error, ValueError, KeyError, TypeError):
            logger.exception("quest load failed, starting with an empty collection")
            self._quests = []

    def _save(self) -> None:
        try:
            self.db.replace_quests(self._quests)
        except sqlite3.Error:
            logger.exception("quest save failed")
            return
        for listener in self._listeners:
            self._notify_one(listener)

    def _notify_one(self, listener: QuestListener) -> None:
        try:
            listener(self.quests)
        except Exception:
            logger.exception("quest listener failed")
