"""Streak bookkeeping for daily and weekly quest completion.

Everything here is pure: functions take a ``StreakState`` and an aware ``now``
and return a new state. Persisting the result is the caller's job.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from quest_reminder.db_models import StreakState
from quest_reminder.time_utils import (
    add_days,
    day_key,
    days_between,
    iso_week_key,
    same_day,
    same_iso_week,
    start_of_day,
    week_range_for,
    weeks_apart,
)


def _local(value: datetime, now: datetime) -> datetime:
    return value.astimezone(now.tzinfo) if now.tzinfo else value


def period_key(period: str, now: datetime) -> int:
    if period == "weekly":
        return iso_week_key(now)
    return day_key(now)


def period_start(period: str, now: datetime) -> datetime:
    if period == "weekly":
        return week_range_for(now).start
    return start_of_day(now)


def in_current_period(period: str, value: datetime | None, now: datetime) -> bool:
    if value is None:
        return False
    local = _local(value, now)
    if period == "weekly":
        return same_iso_week(local, now)
    return same_day(local, now)


def in_previous_period(period: str, value: datetime, now: datetime) -> bool:
    local = _local(value, now)
    if period == "weekly":
        # Same ISO year only: a week-1 completion after week 52/53 does not continue.
        last_year, last_week, _ = local.isocalendar()
        now_year, now_week, _ = now.isocalendar()
        return now_year == last_year and now_week == last_week + 1
    return same_day(local, add_days(now, -1))


def already_counted(state: StreakState, now: datetime) -> bool:
    return in_current_period(state.period, state.last_completion, now)


def handle_streak(state: StreakState, now: datetime) -> StreakState:
    """Count the current period once all due quests of this type are done."""
    if already_counted(state, now):
        return state

    last = state.last_completion
    if last is not None and in_previous_period(state.period, last, now):
        streak = state.current_streak + 1
    else:
        streak = 1

    return replace(
        state,
        current_streak=streak,
        last_completion=period_start(state.period, now),
        rollback_period_key=period_key(state.period, now),
        rollback_streak=state.current_streak,
        rollback_last_completion=last,
    )


def rollback_if_needed(state: StreakState, now: datetime) -> StreakState:
    if state.rollback_period_key is None:
        return state
    if state.rollback_period_key != period_key(state.period, now):
        return state
    if not in_current_period(state.period, state.last_completion, now):
        return state
    return replace(
        state,
        current_streak=state.rollback_streak,
        last_completion=state.rollback_last_completion,
        rollback_period_key=None,
    )


def validate_on_resume(state: StreakState, now: datetime) -> StreakState:
    last = state.last_completion
    if last is None:
        if state.current_streak != 0:
            return replace(state, current_streak=0)
        return state

    local = _local(last, now)
    if state.period == "weekly":
        gap = weeks_apart(local, now)
    else:
        gap = days_between(local, now)

    if gap > 1:
        return replace(state, current_streak=0, last_completion=None)
    return state
