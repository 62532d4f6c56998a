"""Snapshot task: keeps the widget record fresh while the daemon is in the foreground."""

import lessismore.config as config
from lessismore.snapshot import SnapshotPublisher
from lessismore.tasks.base import PeriodicTask


class SnapshotTask(PeriodicTask):
    """Pushes a widget snapshot every SNAPSHOT_INTERVAL seconds."""

    name = "snapshot"
    interval = config.SNAPSHOT_INTERVAL

    def __init__(self, publisher: SnapshotPublisher):
        super().__init__()
        self.publisher = publisher

    def setup(self) -> None:
        self.publisher.publish()

    def run_once(self) -> None:
        self.publisher.publish()
