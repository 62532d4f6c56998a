"""lessismore daemon — main orchestrator.

Opens the database, wires the services, and runs the usage tracker and the
widget snapshot task until told to stop.

Lifecycle signals:
    SIGUSR1  app went to the background: stop ticking, flush the ledger
    SIGUSR2  app came to the foreground: reload, roll over, resume ticking
    SIGHUP   re-read streaks and usage written by the CLI
    SIGTERM / SIGINT  flush and exit
"""

import logging
import os
import signal
import sys
import time

from lessismore.app import Services, build_services
from lessismore.config import (
    DATA_DIR, LOG_PATH, PID_PATH,
    HEALTH_HEARTBEAT_INTERVAL,
)
from lessismore.db import Database
from lessismore.tasks.publisher import SnapshotTask
from lessismore.tasks.tracker import UsageTracker

log = logging.getLogger("lessismore")


def _setup_logging() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(str(LOG_PATH)),
            logging.StreamHandler(sys.stderr),
        ],
    )


def _write_pid() -> None:
    PID_PATH.write_text(str(os.getpid()))


def _remove_pid() -> None:
    PID_PATH.unlink(missing_ok=True)


class Daemon:
    """Owns the DB, the services, and the periodic tasks."""

    def __init__(self, db: Database | None = None, clock=None):
        self.db = db or Database()
        self.clock = clock
        self.services: Services | None = None
        self.tracker: UsageTracker | None = None
        self.snapshots: SnapshotTask | None = None
        self._running = False

    def open(self) -> None:
        """Open storage and build the task set without starting any threads."""
        self.db.open()
        self.services = build_services(self.db, self.clock)
        self.tracker = UsageTracker(
            self.services.usage, self.db, on_checkpoint=self.services.publisher.publish
        )
        self.snapshots = SnapshotTask(self.services.publisher)

    def start(self) -> None:
        _setup_logging()
        _write_pid()
        log.info("lessismore daemon starting (pid=%d)", os.getpid())

        self.open()
        self.db.log_health(time.time(), "startup", f"pid={os.getpid()}")
        self.enter_foreground()

        self._running = True
        signal.signal(signal.SIGTERM, self._handle_signal)
        signal.signal(signal.SIGINT, self._handle_signal)
        signal.signal(signal.SIGHUP, self._handle_reload)
        signal.signal(signal.SIGUSR1, self._handle_background)
        signal.signal(signal.SIGUSR2, self._handle_foreground)

        self._run_heartbeat_loop()

    def stop(self) -> None:
        log.info("lessismore daemon shutting down")
        self._running = False
        self.enter_background()
        self.db.log_health(time.time(), "shutdown", "clean")
        self.db.close()
        _remove_pid()
        log.info("lessismore daemon stopped")

    # ── lifecycle transitions ───────────────────────────────────────────

    def enter_foreground(self) -> None:
        """Resume tracking; picks up a day change that happened while away.

        A no-op while already tracking: reloading then would drop the ticks
        counted since the last checkpoint.
        """
        if self.tracker.running:
            log.info("already in foreground")
            return
        self.services.refresh()
        self.services.streaks.sync_all(self.services.toggles)
        self.tracker.start()
        self.snapshots.start()
        log.info("entered foreground")

    def enter_background(self) -> None:
        """Stop ticking and flush everything to disk."""
        if self.tracker:
            self.tracker.stop()
        if self.snapshots:
            self.snapshots.stop()
        if self.services:
            self.services.usage.persist()
            self.services.publisher.publish()
        log.info("entered background")

    def reload(self) -> None:
        """Pick up streak changes made by the CLI while the tracker keeps running."""
        self.services.streaks.load()
        self.services.streaks.sync_all(self.services.toggles)
        self.services.statistics.reload()
        self.services.publisher.publish()
        self.db.log_health(time.time(), "reload")
        log.info("lessismore daemon reloaded")

    # ── internal ────────────────────────────────────────────────────────

    def _run_heartbeat_loop(self) -> None:
        last_heartbeat = time.time()
        while self._running:
            time.sleep(1)
            now = time.time()
            if now - last_heartbeat >= HEALTH_HEARTBEAT_INTERVAL:
                self.db.log_health(now, "heartbeat")
                last_heartbeat = now

    def _handle_signal(self, signum, frame) -> None:
        log.info("received signal %d", signum)
        self.stop()
        sys.exit(0)

    def _handle_reload(self, signum, frame) -> None:
        log.info("received SIGHUP — reloading")
        self.reload()

    def _handle_background(self, signum, frame) -> None:
        self.enter_background()

    def _handle_foreground(self, signum, frame) -> None:
        self.enter_foreground()


def main() -> None:
    daemon = Daemon()
    daemon.start()


if __name__ == "__main__":
    main()
