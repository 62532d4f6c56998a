"""Service wiring shared by the daemon and the CLI.

One instance of each service per process, built here with its dependencies
passed in explicitly.
"""

import logging
from dataclasses import dataclass

import lessismore.config as config
from lessismore.classifier import classify
from lessismore.clock import SystemClock
from lessismore.db import Database
from lessismore.filters import FilterToggleStore
from lessismore.models import FilterType, UsageCategory
from lessismore.snapshot import FileSnapshotSink, SnapshotPublisher
from lessismore.statistics import StatisticsProjector
from lessismore.streaks import StreakLedger
from lessismore.usage import UsageLedger

log = logging.getLogger(__name__)


@dataclass
class Services:
    db: Database
    clock: object
    toggles: FilterToggleStore
    usage: UsageLedger
    streaks: StreakLedger
    statistics: StatisticsProjector
    publisher: SnapshotPublisher

    def set_filter(self, filter_type: FilterType, enabled: bool) -> int:
        """Flip a filter and keep streaks and activation dates in step.

        Returns the streak days lost when a filter is turned off, else 0.
        """
        self.toggles.set_enabled(filter_type, enabled)
        if enabled:
            self.streaks.activate(filter_type)
            self.statistics.record_filter_activation(filter_type)
            return 0
        lost = self.streaks.deactivate(filter_type)
        self.statistics.reload()
        return lost

    def report_location(self, url: str) -> UsageCategory:
        """Record the page the user is on; the tick loop reads it back."""
        category = classify(url)
        self.db.set(config.CURRENT_CATEGORY_KEY, category.value)
        log.debug("location %s -> %s", url, category.value)
        return category

    def refresh(self) -> None:
        """Re-read ledgers written by another process."""
        self.usage.load()
        self.streaks.load()


def build_services(db: Database, clock=None, sink: FileSnapshotSink | None = None) -> Services:
    """Wire and load every service on an already-open database."""
    clock = clock or SystemClock()
    toggles = FilterToggleStore(db)

    usage = UsageLedger(db, clock)
    usage.load()

    streaks = StreakLedger(db, clock)
    streaks.load()
    streaks.sync_all(toggles)

    statistics = StatisticsProjector(toggles, clock)
    publisher = SnapshotPublisher(usage, streaks, sink or FileSnapshotSink(), clock)
    return Services(
        db=db,
        clock=clock,
        toggles=toggles,
        usage=usage,
        streaks=streaks,
        statistics=statistics,
        publisher=publisher,
    )
