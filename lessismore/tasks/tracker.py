"""Usage tracker — the 1-second tick that feeds the usage ledger.

The current category is whatever the host last reported into the key-value
store (see `lessismore visit`). The ledger is checkpointed every
CHECKPOINT_EVERY_SECONDS ticks and flushed when the tracker stops.
"""

import logging

import lessismore.config as config
from lessismore.classifier import parse_category
from lessismore.db import Database
from lessismore.tasks.base import PeriodicTask
from lessismore.usage import UsageLedger

log = logging.getLogger(__name__)


class UsageTracker(PeriodicTask):
    name = "usage"
    interval = config.TICK_INTERVAL

    def __init__(self, ledger: UsageLedger, db: Database, on_checkpoint=None):
        super().__init__()
        self.ledger = ledger
        self.db = db
        self.on_checkpoint = on_checkpoint
        self._ticks = 0

    def setup(self) -> None:
        self.ledger.rollover_if_needed()

    def run_once(self) -> None:
        category = parse_category(self.db.get(config.CURRENT_CATEGORY_KEY))
        self.ledger.tick(category)
        self._ticks += 1
        if self._ticks % config.CHECKPOINT_EVERY_SECONDS == 0:
            self.checkpoint()

    def checkpoint(self) -> None:
        self.ledger.persist()
        if self.on_checkpoint:
            self.on_checkpoint()

    def teardown(self) -> None:
        self.checkpoint()
