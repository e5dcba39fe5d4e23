from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from typing import Any, Protocol, Sequence

from quest_reminder.db_converters import _row_to_reminder
from quest_reminder.db_models import PendingReminder


class DbProtocol(Protocol):
    def _connect(self) -> sqlite3.Connection: ...
    def get_setting(self, key: str, default: Any = None) -> Any: ...


class SystemMixin:
    def get_setting(self: DbProtocol, key: str, default: Any = None) -> Any:
        with self._connect() as conn:
            row = conn.execute("SELECT value_json FROM app_settings WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        try:
            return json.loads(str(row["value_json"]))
        except json.JSONDecodeError:
            return default

    def set_setting(self: DbProtocol, key: str, value: Any) -> None:
        now = datetime.now().isoformat()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO app_settings(key, value_json, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value_json=excluded.value_json,
                    updated_at=excluded.updated_at
                """,
                (key, json.dumps(value), now),
            )

    def get_owner_chat_id(self: DbProtocol) -> int | None:
        value = self.get_setting("owner_chat_id")
        try:
            return int(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    def get_language(self: DbProtocol) -> str:
        return str(self.get_setting("language_code", "en") or "en")

    def replace_pending_reminders(self: DbProtocol, reminders: Sequence[PendingReminder]) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM pending_reminders")
            conn.executemany(
                "INSERT INTO pending_reminders(id, quest_id, title, body, trigger_at) VALUES (?, ?, ?, ?, ?)",
                [(r.id, r.quest_id, r.title, r.body, r.trigger_at.isoformat()) for r in reminders],
            )

    def list_pending_reminders(self: DbProtocol) -> list[PendingReminder]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM pending_reminders").fetchall()
        reminders = [_row_to_reminder(r) for r in rows]
        return sorted(reminders, key=lambda r: r.trigger_at)

    def was_event_sent(self: DbProtocol, event_key: str) -> bool:
        with self._connect() as conn:
            row = conn.execute("SELECT 1 FROM reminder_events WHERE event_key = ?", (event_key,)).fetchone()
        return row is not None

    def mark_event_sent(self: DbProtocol, event_key: str, sent_at: datetime) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO reminder_events(event_key, sent_at) VALUES (?, ?)",
                (event_key, sent_at.isoformat()),
            )
