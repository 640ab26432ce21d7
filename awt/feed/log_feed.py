"""Buffered log feed for long-running backend jobs.

The feed holds the status events of one job. When the job's complete log
bundle is delivered the feed replays it verbatim; until then it checks the
backend on a fixed interval. Listeners are notified after every change so
a view never has to poll the feed itself.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from enum import StrEnum
from typing import Any

from awt.core.constants import PollingConstants
from awt.exceptions import AWTError, ConfigurationError
from awt.feed.polling import PollingTask
from awt.models.logs import LogEvent

logger = logging.getLogger(__name__)

BundleFetcher = Callable[[str], Sequence[LogEvent] | None]
FeedListener = Callable[["ProcessLogFeed"], None]


class FeedMode(StrEnum):
    """Lifecycle states of a log feed."""

    IDLE = "idle"
    REPLAYING = "replaying"
    POLLING = "polling"
    STALLED = "stalled"


class ProcessLogFeed:
    """Ordered status events for one backend job."""

    def __init__(
        self,
        job_id: str,
        fetch_bundle: BundleFetcher | None = None,
        interval: float = PollingConstants.INTERVAL_SECONDS,
    ) -> None:
        """Initialize an idle feed.

        Args:
            job_id: Backend process id the events belong to
            fetch_bundle: Returns the job's log bundle, or None while it is pending
            interval: Seconds between status checks while polling
        """
        self.job_id = job_id
        self.fetch_bundle = fetch_bundle
        self.interval = interval

        self._lock = threading.RLock()
        self._replayed = threading.Event()
        self._events: list[LogEvent] = []
        self._listeners: list[FeedListener] = []
        self._task: PollingTask | None = None

        self.mode = FeedMode.IDLE
        self.history: list[FeedMode] = [FeedMode.IDLE]
        self.last_error: Exception | None = None

    def __enter__(self) -> "ProcessLogFeed":
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()

    def __len__(self) -> int:
        return len(self._events)

    @property
    def events(self) -> list[LogEvent]:
        """Copy of the buffered events in delivered order."""
        with self._lock:
            return list(self._events)

    @property
    def is_polling(self) -> bool:
        return self._task is not None and self._task.running

    def subscribe(self, listener: FeedListener) -> Callable[[], None]:
        """Register a listener called after each change.

        Returns:
            A function that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                logger.exception(f"Listener of feed {self.job_id} failed")

    def _enter(self, mode: FeedMode) -> None:
        if mode != self.mode:
            logger.debug(f"Feed {self.job_id}: {self.mode.value} -> {mode.value}")
        self.mode = mode
        self.history.append(mode)

    def deliver(self, bundle: Sequence[LogEvent]) -> None:
        """Adopt a complete log bundle, replacing any buffered events.

        Delivering while already replaying refreshes the events rather than
        appending to them. Polling stops once a bundle arrives.
        """
        with self._lock:
            self._events = list(bundle)
            self.last_error = None
            self._enter(FeedMode.REPLAYING)
            task, self._task = self._task, None
        if task is not None:
            task.cancel()
        self._replayed.set()
        logger.info(f"Feed {self.job_id} received {len(bundle)} events")
        self._notify()

    def tick(self) -> FeedMode:
        """Run one status check and apply its result.

        Returns:
            The mode after the check

        Raises:
            ConfigurationError: If the feed has no bundle fetcher
            Exception: Whatever the status check raised (the feed is left stalled)
        """
        if self.mode == FeedMode.REPLAYING:
            return self.mode
        if self.fetch_bundle is None:
            raise ConfigurationError(f"Feed {self.job_id} has no log source to poll")

        try:
            bundle = self.fetch_bundle(self.job_id)
        except Exception as e:
            self._stall(e)
            raise

        if bundle is not None:
            self.deliver(bundle)
            return self.mode

        with self._lock:
            # A bundle may have been delivered while the check was running
            if self.mode == FeedMode.REPLAYING:
                return self.mode
            self.last_error = None
            self._enter(FeedMode.POLLING)
        self._notify()
        return self.mode

    def _stall(self, error: Exception) -> None:
        with self._lock:
            self.last_error = error
            self._enter(FeedMode.STALLED)
        if isinstance(error, AWTError):
            logger.warning(f"Status check for {self.job_id} failed: {error}")
        else:
            logger.exception(f"Unexpected error checking {self.job_id}: {error!r}")
        self._notify()

    def start(self) -> FeedMode:
        """Check once now and keep polling on the interval while pending.

        Returns:
            The mode after the first check

        Raises:
            ConfigurationError: If the feed has no bundle fetcher
        """
        if self.mode != FeedMode.IDLE:
            return self.mode
        if self.fetch_bundle is None:
            raise ConfigurationError(f"Feed {self.job_id} has no log source to poll")

        try:
            self.tick()
        except Exception:
            # Recorded in last_error; polling retries on the interval.
            pass

        with self._lock:
            # Re-checked under the lock: another thread may have delivered meanwhile
            if self.mode != FeedMode.REPLAYING and self._task is None:
                self._task = PollingTask(self.interval, self._poll, name=f"awt-feed-{self.job_id}")
                self._task.start()
            return self.mode

    def _poll(self) -> None:
        try:
            self.tick()
        except Exception as e:
            # Recorded in last_error; the next interval retries.
            if self.last_error is not e:
                self._stall(e)

    def stop(self) -> None:
        """Stop polling. Safe to call more than once."""
        with self._lock:
            task, self._task = self._task, None
        if task is not None:
            task.cancel()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until a bundle has been delivered.

        Returns:
            True if the feed is replaying, False on timeout
        """
        return self._replayed.wait(timeout)
