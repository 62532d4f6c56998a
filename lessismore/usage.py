"""Usage ledger — per-day, per-category seconds with week and month views.

Every bucket carries its concrete date. Rollover re-dates any weekday slot
that has fallen out of the trailing seven days, so a Monday from last week
never mixes into this week's Monday.

Month buckets are a projection of the week view: they are zeroed and rebuilt
from the seven day buckets on every sync, so they only ever cover the days
the week view still holds.
"""

import json
import logging
import threading
from datetime import date, timedelta

import lessismore.config as config
from lessismore.clock import (
    WEEKDAY_LABELS,
    day_key,
    month_key,
    week_of_month,
    weekday_label,
    weeks_in_month,
)
from lessismore.db import Database
from lessismore.models import DayBucket, MonthBucket, UsageCategory

log = logging.getLogger(__name__)


def _percent_change(current: int, previous: int) -> float:
    if previous <= 0:
        return 0.0
    return (current - previous) / previous * 100.0


def _trailing_dates(today: date) -> dict[str, date]:
    """Weekday label -> the date carrying that label in [today-6, today]."""
    dates = (today - timedelta(days=offset) for offset in range(config.WEEK_DAYS))
    return {weekday_label(d): d for d in dates}


class UsageLedger:
    """Owns the week view and month buckets. All mutation goes through self._lock."""

    def __init__(self, db: Database, clock):
        self.db = db
        self.clock = clock
        self._lock = threading.Lock()
        today = self._today()
        self._week: dict[str, DayBucket] = {
            label: DayBucket(day=d) for label, d in _trailing_dates(today).items()
        }
        self._month: list[MonthBucket] = self._empty_month(today)
        self._last_day = day_key(today)
        self._last_month = month_key(today)

    def _today(self) -> date:
        return self.clock.now().date()

    @staticmethod
    def _empty_month(today: date) -> list[MonthBucket]:
        return [MonthBucket(week_number=n) for n in range(1, weeks_in_month(today) + 1)]

    # ── mutation ────────────────────────────────────────────────────────

    def tick(self, category: UsageCategory, seconds: int = 1) -> int:
        """Attribute elapsed seconds to today's bucket. Returns today's total."""
        with self._lock:
            today = self._rollover_locked()
            bucket = self._week[weekday_label(today)]
            bucket.add(category, seconds)
            return bucket.total_seconds

    def rollover_if_needed(self) -> bool:
        """Reset stale buckets after a day or month boundary. Returns True on rollover."""
        with self._lock:
            before = (self._last_day, self._last_month)
            self._rollover_locked()
            return before != (self._last_day, self._last_month)

    def _rollover_locked(self) -> date:
        today = self._today()
        today_key = day_key(today)
        if today_key != self._last_day:
            for label, expected in _trailing_dates(today).items():
                bucket = self._week[label]
                if bucket.day != expected:
                    bucket.reset(expected)
            log.info("day rollover %s -> %s", self._last_day, today_key)
            self._last_day = today_key

        current_month = month_key(today)
        if current_month != self._last_month:
            self._month = self._empty_month(today)
            log.info("month rollover %s -> %s (%d weeks)",
                     self._last_month, current_month, len(self._month))
            self._last_month = current_month
        return today

    def sync_week_to_month(self) -> None:
        """Rebuild the month buckets from the week view."""
        with self._lock:
            self._sync_locked()

    def _sync_locked(self) -> date:
        today = self._rollover_locked()
        self._month = self._empty_month(today)
        for bucket in self._week.values():
            d = bucket.day
            if (d.year, d.month) != (today.year, today.month) or d > today:
                continue
            target = self._month[week_of_month(d) - 1]
            for category, seconds in bucket.seconds_by_category.items():
                target.add(category, seconds)
        return today

    # ── queries ─────────────────────────────────────────────────────────

    @property
    def today(self) -> DayBucket:
        with self._lock:
            today = self._rollover_locked()
            return self._week[weekday_label(today)].copy()

    @property
    def yesterday(self) -> DayBucket:
        with self._lock:
            today = self._rollover_locked()
            return self._week[weekday_label(today - timedelta(days=1))].copy()

    @property
    def formatted_time(self) -> str:
        return self.today.formatted_time

    def bucket(self, label: str) -> DayBucket:
        with self._lock:
            self._rollover_locked()
            return self._week[label].copy()

    def week_view(self) -> list[DayBucket]:
        """Day buckets ordered Mon..Sun."""
        with self._lock:
            self._rollover_locked()
            return [self._week[label].copy() for label in WEEKDAY_LABELS]

    def week_view_chronological(self) -> list[DayBucket]:
        """Day buckets ordered oldest to newest, ending today."""
        return sorted(self.week_view(), key=lambda b: b.day)

    def weekly_total_seconds(self) -> int:
        return sum(b.total_seconds for b in self.week_view())

    def today_seconds_by_category(self) -> dict[UsageCategory, int]:
        return self.today.seconds_by_category

    def month_view(self) -> list[MonthBucket]:
        with self._lock:
            self._sync_locked()
            return [b.copy() for b in self._month]

    def current_week_total(self) -> int:
        with self._lock:
            today = self._sync_locked()
            return self._month[week_of_month(today) - 1].total_seconds

    def comparison_to_yesterday(self) -> float:
        """Percent change of today's total against yesterday's; 0.0 when yesterday is empty."""
        with self._lock:
            today = self._rollover_locked()
            current = self._week[weekday_label(today)].total_seconds
            previous = self._week[weekday_label(today - timedelta(days=1))].total_seconds
        return _percent_change(current, previous)

    def comparison_to_last_week(self) -> float:
        """Percent change of this week-of-month against the previous one in the same month."""
        with self._lock:
            today = self._sync_locked()
            week = week_of_month(today)
            if week <= 1:
                return 0.0
            current = self._month[week - 1].total_seconds
            previous = self._month[week - 2].total_seconds
        return _percent_change(current, previous)

    # ── persistence ─────────────────────────────────────────────────────

    def persist(self) -> None:
        """Write the ledger to the key-value store. Failures are logged, not retried."""
        with self._lock:
            week = json.dumps([self._week[label].to_dict() for label in WEEKDAY_LABELS])
            month = json.dumps([b.to_dict() for b in self._month])
            last_day, last_month = self._last_day, self._last_month
        try:
            self.db.set(config.USAGE_WEEK_KEY, week)
            self.db.set(config.USAGE_MONTH_KEY, month)
            self.db.set(config.USAGE_LAST_DAY_KEY, last_day)
            self.db.set(config.USAGE_LAST_MONTH_KEY, last_month)
        except Exception:
            log.exception("failed to persist usage ledger")
            return
        log.debug("usage ledger persisted (last_day=%s)", last_day)

    def load(self) -> None:
        """Restore the ledger from the key-value store, cold-starting on any problem."""
        try:
            raw_week = self.db.get(config.USAGE_WEEK_KEY)
            raw_month = self.db.get(config.USAGE_MONTH_KEY)
            last_day = self.db.get(config.USAGE_LAST_DAY_KEY)
            last_month = self.db.get(config.USAGE_LAST_MONTH_KEY)
        except Exception:
            log.exception("failed to read usage ledger, starting fresh")
            return
        if raw_week is None:
            log.info("no saved usage ledger, starting fresh")
            return

        try:
            buckets = [DayBucket.from_dict(item) for item in json.loads(raw_week)]
            months = [MonthBucket.from_dict(item) for item in json.loads(raw_month or "[]")]
        except (ValueError, KeyError, TypeError, AttributeError):
            log.warning("saved usage ledger is corrupt, starting fresh")
            return

        week = {b.weekday: b for b in buckets}
        if set(week) != set(WEEKDAY_LABELS):
            log.warning("saved usage ledger has %d weekday buckets, starting fresh", len(week))
            return

        with self._lock:
            self._week = week
            if months and last_month:
                self._month = sorted(months, key=lambda b: b.week_number)
                self._last_month = last_month
            self._last_day = last_day or ""
            self._rollover_locked()
            self._sync_locked()
        log.info("usage ledger loaded (today=%ds)", self.today.total_seconds)
