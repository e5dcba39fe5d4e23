from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Protocol

from quest_reminder.db_converters import _row_to_streak_state, _streak_state_to_params
from quest_reminder.db_models import QUEST_TYPES, StreakState


class DbProtocol(Protocol):
    def _connect(self) -> sqlite3.Connection: ...


class StreakMixin:
    def load_streak_states(self: DbProtocol) -> dict[str, StreakState]:
        states = {period: StreakState(period=period) for period in QUEST_TYPES}
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM streak_state").fetchall()
        for row in rows:
            state = _row_to_streak_state(row)
            if state.period in states:
                states[state.period] = state
        return states

    def save_streak_states(self: DbProtocol, states: dict[str, StreakState], now: datetime) -> None:
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO streak_state(
                    period, current_streak, last_completion, rollback_period_key,
                    rollback_streak, rollback_last_completion, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(period) DO UPDATE SET
                    current_streak=excluded.current_streak,
                    last_completion=excluded.last_completion,
                    rollback_period_key=excluded.rollback_period_key,
                    rollback_streak=excluded.rollback_streak,
                    rollback_last_completion=excluded.rollback_last_completion,
                    updated_at=excluded.updated_at
                """,
                [_streak_state_to_params(s, now) for s in states.values()],
            )
