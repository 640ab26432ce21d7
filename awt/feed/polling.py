"""Cancellable fixed-interval background task."""

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class PollingTask:
    """Run a callback every ``interval`` seconds on a daemon thread until cancelled.

    The first call happens one interval after ``start()``. Cancelling is
    idempotent and may be done from inside the callback.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "awt-poll") -> None:
        if interval <= 0:
            raise ValueError("Polling interval must be positive")
        self.interval = interval
        self.callback = callback
        self.name = name
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stopped.is_set()

    def start(self) -> None:
        """Start polling; does nothing if already running."""
        if self.running:
            return
        self._stopped.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.debug(f"Started {self.name} every {self.interval}s")

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception(f"{self.name} callback failed")

    def cancel(self, timeout: float | None = None) -> None:
        """Stop polling. Safe to call more than once."""
        if self._stopped.is_set() and self._thread is None:
            return

        self._stopped.set()
        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout if timeout is not None else self.interval)
        logger.debug(f"Cancelled {self.name}")
