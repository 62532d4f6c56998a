"""Periodic tasks: a daemon thread calling run_once() on a fixed interval."""

import abc
import logging
import threading

log = logging.getLogger(__name__)


class PeriodicTask(abc.ABC):
    """Subclasses set `name` and `interval` and implement run_once().

    setup() runs on the caller's thread before the first cycle and teardown()
    after the worker thread has exited, so a final flush never overlaps a cycle.
    """

    name = "task"
    interval: float = 1.0

    def __init__(self):
        self._thread: threading.Thread | None = None
        self._stopped = threading.Event()
        self._stopped.set()

    @abc.abstractmethod
    def run_once(self) -> None:
        ...

    def setup(self) -> None:
        pass

    def teardown(self) -> None:
        pass

    @property
    def running(self) -> bool:
        return not self._stopped.is_set()

    def start(self) -> None:
        if self.running:
            return
        self.setup()
        self._stopped.clear()
        self._thread = threading.Thread(target=self._loop, name=f"task-{self.name}", daemon=True)
        self._thread.start()
        log.info("[%s] running every %.1fs", self.name, self.interval)

    def stop(self) -> None:
        if not self.running:
            return
        self._stopped.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout=self.interval + 2)
        self.teardown()
        log.info("[%s] stopped", self.name)

    def _loop(self) -> None:
        while not self._stopped.wait(self.interval):
            try:
                self.run_once()
            except Exception:
                log.exception("[%s] cycle failed", self.name)
