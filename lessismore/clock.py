"""Clock and calendar helpers.

Weeks are Monday-first. The first week of a month is the (possibly partial)
week containing the 1st, so a month spans 4 to 6 week-of-month partitions.
"""

import calendar
from datetime import date, datetime, timedelta

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class SystemClock:
    """Local wall-clock time."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """A clock that only moves when told to. Handy for tests and replays."""

    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now

    def advance(self, **kwargs) -> datetime:
        """Move forward by a timedelta built from kwargs (days=1, seconds=30, ...)."""
        self._now += timedelta(**kwargs)
        return self._now


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def day_key(value: date | datetime) -> str:
    return _as_date(value).strftime("%Y-%m-%d")


def month_key(value: date | datetime) -> str:
    return _as_date(value).strftime("%Y-%m")


def weekday_label(value: date | datetime) -> str:
    return WEEKDAY_LABELS[_as_date(value).weekday()]


def week_of_month(value: date | datetime) -> int:
    d = _as_date(value)
    offset = d.replace(day=1).weekday()
    return (d.day + offset - 1) // 7 + 1


def weeks_in_month(value: date | datetime) -> int:
    d = _as_date(value)
    last = calendar.monthrange(d.year, d.month)[1]
    return week_of_month(d.replace(day=last))


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Whole calendar days from start to end (negative if end is earlier)."""
    return (_as_date(end) - _as_date(start)).days
