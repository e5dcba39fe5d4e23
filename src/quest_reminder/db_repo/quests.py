from __future__ import annotations

import sqlite3
from typing import Protocol, Sequence

from quest_reminder.db_converters import _quest_to_params, _row_to_quest
from quest_reminder.db_models import Quest


class DbProtocol(Protocol):
    def _connect(self) -> sqlite3.Connection: ...


class QuestMixin:
    def load_quests(self: DbProtocol) -> list[Quest]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM quests ORDER BY position ASC").fetchall()
        return [_row_to_quest(r) for r in rows]

    def replace_quests(self: DbProtocol, quests: Sequence[Quest]) -> None:
        """Overwrite the whole collection in one transaction."""
        with self._connect() as conn:
            conn.execute("DELETE FROM quests")
            conn.executemany(
                """
                INSERT INTO quests(
                    id, position, title, quest_type, notes, scheduled_date, recurrence,
                    icon, completed, archived, deleted, completed_at, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [_quest_to_params(q, i) for i, q in enumerate(quests)],
            )

    def count_quests(self: DbProtocol) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) AS n FROM quests").fetchone()
        return int(row["n"]) if row else 0
