from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo


DEFAULT_TZ = "Europe/Lisbon"


def now_local(tz_name: str = DEFAULT_TZ) -> datetime:
    return datetime.now(tz=ZoneInfo(tz_name))


@dataclass(frozen=True)
class WeekRange:
    start: datetime
    end: datetime


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def week_range_for(dt: datetime) -> WeekRange:
    local_midnight = start_of_day(dt)
    start = local_midnight - timedelta(days=local_midnight.weekday())
    end = start + timedelta(days=7)
    return WeekRange(start=start, end=end)


def add_days(dt: datetime, days: int) -> datetime:
    # Calendar arithmetic on the local date so DST shifts keep midnight at midnight.
    target = dt.date() + timedelta(days=days)
    return dt.replace(year=target.year, month=target.month, day=target.day)


def day_key(dt: datetime) -> int:
    return int(start_of_day(dt).timestamp())


def iso_week_key(dt: datetime) -> int:
    iso = dt.isocalendar()
    return iso[0] * 100 + iso[1]


def days_between(earlier: datetime, later: datetime) -> int:
    return (later.date() - earlier.date()).days


def same_day(a: datetime, b: datetime) -> bool:
    return a.date() == b.date()


def same_iso_week(a: datetime, b: datetime) -> bool:
    return iso_week_key(a) == iso_week_key(b)


def weeks_apart(earlier: datetime, later: datetime) -> int:
    """ISO weeks between two instants; a change of ISO year counts as two."""
    e_year, e_week, _ = earlier.isocalendar()
    l_year, l_week, _ = later.isocalendar()
    if e_year == l_year:
        return l_week - e_week
    return 2


