"""Widget snapshot — a flat record written to the shared directory.

The widget surface reads the JSON file on its own schedule; touching the
refresh marker asks it to reload early.
"""

import json
import logging
import os
from dataclasses import asdict
from pathlib import Path

import lessismore.config as config
from lessismore.models import FilterType, WidgetSnapshot
from lessismore.streaks import StreakLedger
from lessismore.usage import UsageLedger

log = logging.getLogger(__name__)


class FileSnapshotSink:
    def __init__(self, path: Path | None = None, marker: Path | None = None):
        self.path = path or config.SNAPSHOT_PATH
        self.marker = marker or config.REFRESH_MARKER_PATH

    def write(self, snapshot: WidgetSnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(asdict(snapshot), indent=2))
        os.replace(tmp, self.path)
        self.request_refresh()

    def read(self) -> WidgetSnapshot | None:
        if not self.path.exists():
            return None
        try:
            return WidgetSnapshot(**json.loads(self.path.read_text()))
        except (ValueError, TypeError):
            log.warning("widget snapshot at %s is unreadable", self.path)
            return None

    def request_refresh(self) -> None:
        self.marker.parent.mkdir(parents=True, exist_ok=True)
        self.marker.touch()


class SnapshotPublisher:
    """Builds snapshots from both ledgers and pushes them to a sink."""

    def __init__(self, usage: UsageLedger, streaks: StreakLedger, sink: FileSnapshotSink, clock):
        self.usage = usage
        self.streaks = streaks
        self.sink = sink
        self.clock = clock

    def build(self) -> WidgetSnapshot:
        best = self.streaks.best_active_streak()
        if best:
            filter_type, days = best
            record = max(self.streaks.longest_streak(filter_type), days)
            best_name = filter_type.display_name
        else:
            days, record, best_name = 0, 0, ""

        return WidgetSnapshot(
            today_seconds=self.usage.today.total_seconds,
            yesterday_seconds=self.usage.yesterday.total_seconds,
            weekly_total_seconds=self.usage.weekly_total_seconds(),
            percentage_change=round(self.usage.comparison_to_yesterday(), 2),
            best_streak_days=days,
            best_streak_filter_name=best_name,
            best_streak_personal_record=record,
            filter_streak_days={f.value: self.streaks.current_streak_days(f) for f in FilterType},
            last_update=self.clock.now().isoformat(timespec="seconds"),
        )

    def publish(self) -> WidgetSnapshot | None:
        """Build and write a snapshot. Write failures are logged and dropped."""
        snapshot = self.build()
        try:
            self.sink.write(snapshot)
        except OSError:
            log.exception("failed to write widget snapshot to %s", self.sink.path)
            return None
        log.debug("widget snapshot published (today=%ds)", snapshot.today_seconds)
        return snapshot
