"""Streak ledger — consecutive days each filter has stayed on.

A streak's length is never stored: it is recomputed from the activation
timestamp and the clock on every read. The only stored counter is the
personal record, which deactivation folds the lost streak into.
"""

import json
import logging
import threading

import lessismore.config as config
from lessismore.db import Database
from lessismore.models import FilterStreak, FilterType

log = logging.getLogger(__name__)


class StreakLedger:
    def __init__(self, db: Database, clock):
        self.db = db
        self.clock = clock
        self._lock = threading.Lock()
        self._streaks: dict[FilterType, FilterStreak] = {
            f: FilterStreak(filter_id=f.value) for f in FilterType
        }

    # ── queries ─────────────────────────────────────────────────────────

    def streak(self, filter_id) -> FilterStreak:
        filter_type = FilterType.parse(filter_id)
        if filter_type is None:
            return FilterStreak(filter_id=str(filter_id))
        with self._lock:
            return self._streaks[filter_type]

    def current_streak_days(self, filter_id) -> int:
        return self.streak(filter_id).current_streak_days(self.clock.now())

    def longest_streak(self, filter_id) -> int:
        return self.streak(filter_id).longest_streak

    def has_active_streak(self, filter_id) -> bool:
        return self.current_streak_days(filter_id) > 0

    def best_active_streak(self) -> tuple[FilterType, int] | None:
        """Longest running streak; ties go to the earlier filter in catalog order."""
        best = None
        for filter_type, days in self._current_days():
            if days > 0 and (best is None or days > best[1]):
                best = (filter_type, days)
        return best

    def all_active_streaks(self) -> list[tuple[FilterType, int]]:
        """Running streaks, longest first; ties keep catalog order."""
        active = [(f, days) for f, days in self._current_days() if days > 0]
        return sorted(active, key=lambda item: item[1], reverse=True)

    def _current_days(self) -> list[tuple[FilterType, int]]:
        now = self.clock.now()
        with self._lock:
            return [(f, self._streaks[f].current_streak_days(now)) for f in FilterType]

    # ── mutation ────────────────────────────────────────────────────────

    def activate(self, filter_id) -> None:
        filter_type = FilterType.parse(filter_id)
        if filter_type is None:
            log.warning("activate: unknown filter %r", filter_id)
            return
        with self._lock:
            streak = self._streaks[filter_type]
            if streak.is_active:
                return
            streak.start_date = self.clock.now()
            streak.is_active = True
        log.info("streak started for %s", filter_type.value)
        self.persist()

    def deactivate(self, filter_id) -> int:
        """End the streak and return the days that were lost."""
        filter_type = FilterType.parse(filter_id)
        if filter_type is None:
            log.warning("deactivate: unknown filter %r", filter_id)
            return 0
        with self._lock:
            streak = self._streaks[filter_type]
            lost = streak.current_streak_days(self.clock.now())
            if lost > streak.longest_streak:
                streak.longest_streak = lost
            streak.start_date = None
            streak.is_active = False
        log.info("streak ended for %s after %d day(s)", filter_type.value, lost)
        self.persist()
        return lost

    def sync_with_external_state(self, filter_id, is_enabled: bool) -> None:
        """Bring one filter's streak in line with the toggle store."""
        streak = self.streak(filter_id)
        if is_enabled and not streak.is_active:
            self.activate(filter_id)
        elif not is_enabled and streak.is_active:
            self.deactivate(filter_id)

    def sync_all(self, toggles) -> None:
        for filter_type in FilterType:
            self.sync_with_external_state(filter_type, toggles.is_enabled(filter_type))

    # ── persistence ─────────────────────────────────────────────────────

    def persist(self) -> None:
        with self._lock:
            payload = json.dumps({f.value: s.to_dict() for f, s in self._streaks.items()})
        try:
            self.db.set(config.STREAKS_KEY, payload)
        except Exception:
            log.exception("failed to persist streaks")

    def load(self) -> None:
        """Restore streaks, keeping zero state for anything missing or unreadable."""
        try:
            raw = self.db.get(config.STREAKS_KEY)
        except Exception:
            log.exception("failed to read streaks, starting fresh")
            return
        if raw is None:
            self.persist()
            return
        try:
            decoded = {
                FilterType.parse(key): FilterStreak.from_dict(value)
                for key, value in json.loads(raw).items()
            }
        except (ValueError, KeyError, TypeError, AttributeError):
            log.warning("saved streaks are corrupt, starting fresh")
            return
        with self._lock:
            for filter_type, streak in decoded.items():
                if filter_type is not None:
                    self._streaks[filter_type] = streak
        log.info("streaks loaded (%d active)", len(self.all_active_streaks()))
