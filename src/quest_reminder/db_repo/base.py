from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path


class BaseDatabase:
    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """
            )
            current = {row["version"] for row in conn.execute("SELECT version FROM schema_migrations")}

            migrations: dict[int, str] = {
                1: """
                    CREATE TABLE quests (
                        id TEXT PRIMARY KEY,
                        position INTEGER NOT NULL,
                        title TEXT NOT NULL,
                        quest_type TEXT NOT NULL CHECK(quest_type IN ('daily', 'weekly')),
                        notes TEXT NOT NULL DEFAULT '',
                        scheduled_date TEXT,
                        recurrence TEXT NOT NULL DEFAULT 'none',
                        icon TEXT NOT NULL DEFAULT 'flame',
                        completed INTEGER NOT NULL DEFAULT 0,
                        archived INTEGER NOT NULL DEFAULT 0,
                        deleted INTEGER NOT NULL DEFAULT 0,
                        completed_at TEXT,
                        created_at TEXT NOT NULL
                    );

                    CREATE INDEX idx_quests_position ON quests(position);

                    CREATE TABLE streak_state (
                        period TEXT PRIMARY KEY CHECK(period IN ('daily', 'weekly')),
                        current_streak INTEGER NOT NULL DEFAULT 0,
                        last_completion TEXT,
                        rollback_period_key INTEGER,
                        rollback_streak INTEGER NOT NULL DEFAULT 0,
                        rollback_last_completion TEXT,
                        updated_at TEXT NOT NULL
                    );

                    CREATE TABLE app_settings (
                        key TEXT PRIMARY KEY,
                        value_json TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );
                """,
                2: """
                    CREATE TABLE pending_reminders (
                        id TEXT PRIMARY KEY,
                        quest_id TEXT NOT NULL,
                        title TEXT NOT NULL,
                        body TEXT NOT NULL,
                        trigger_at TEXT NOT NULL
                    );

                    CREATE INDEX idx_pending_reminders_trigger ON pending_reminders(trigger_at);

                    CREATE TABLE reminder_events (
                        event_key TEXT PRIMARY KEY,
                        sent_at TEXT NOT NULL
                    );
                """,
            }

            now = datetime.now().isoformat(timespec="seconds")
            for version in sorted(migrations):
                if version in current:
                    continue
                conn.executescript(migrations[version])
                conn.execute(
                    "INSERT INTO schema_migrations(version, applied_at) VALUES (?, ?)",
                    (version, now),
                )
