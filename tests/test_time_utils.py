from datetime import datetime
from zoneinfo import ZoneInfo

from quest_reminder.time_utils import (
    add_days,
    days_between,
    iso_week_key,
    same_iso_week,
    start_of_day,
    week_range_for,
    weeks_apart,
)


def _dt(y: int, m: int, d: int, h: int = 10, minute: int = 0) -> datetime:
    return datetime(y, m, d, h, minute, tzinfo=ZoneInfo("Europe/Lisbon"))


def test_week_range_monday_start() -> None:
    week = week_range_for(_dt(2026, 2, 4, 10, 30))  # Wednesday
    assert week.start.strftime("%Y-%m-%d %H:%M") == "2026-02-02 00:00"
    assert week.end.strftime("%Y-%m-%d %H:%M") == "2026-02-09 00:00"


def test_add_days_keeps_local_midnight_across_dst() -> None:
    # Lisbon switches to summer time on 2026-03-29.
    shifted = add_days(start_of_day(_dt(2026, 3, 28)), 1)
    assert shifted.strftime("%Y-%m-%d %H:%M") == "2026-03-29 00:00"
    assert shifted.utcoffset() != _dt(2026, 3, 28).utcoffset()


def test_days_between_uses_calendar_dates() -> None:
    assert days_between(_dt(2026, 2, 9, 23, 59), _dt(2026, 2, 10, 0, 1)) == 1
    assert days_between(_dt(2026, 2, 10, 1), _dt(2026, 2, 10, 23)) == 0


def test_iso_week_key_and_year_boundary() -> None:
    assert iso_week_key(_dt(2026, 2, 11)) == 202607
    # 2025-12-29 already belongs to ISO week 1 of 2026.
    assert iso_week_key(_dt(2025, 12, 29)) == 202601
    assert same_iso_week(_dt(2025, 12, 29), _dt(2026, 1, 4))
    assert weeks_apart(_dt(2026, 2, 2), _dt(2026, 2, 11)) == 1
    assert weeks_apart(_dt(2025, 12, 22), _dt(2026, 1, 2)) == 2
