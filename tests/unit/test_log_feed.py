import threading

import pytest

from awt.exceptions import ConfigurationError, UnavailableError
from awt.feed import FeedMode, PollingTask, ProcessLogFeed


class ScriptedSource:
    """Bundle fetcher returning queued outcomes, then pending forever."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self, job_id):
        self.calls += 1
        outcome = self.outcomes.pop(0) if self.outcomes else None
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_pending_twice_then_bundle(event_factory):
    bundle = event_factory(5)
    feed = ProcessLogFeed("P-1", ScriptedSource(None, None, bundle), interval=60)

    assert feed.tick() == FeedMode.POLLING
    assert feed.tick() == FeedMode.POLLING
    assert feed.tick() == FeedMode.REPLAYING

    assert feed.history == [FeedMode.IDLE, FeedMode.POLLING, FeedMode.POLLING, FeedMode.REPLAYING]
    assert [event.message for event in feed.events] == [f"message {index}" for index in range(5)]
    assert len(feed) == 5


def test_replaying_feed_ignores_further_checks(event_factory):
    source = ScriptedSource(event_factory(2))
    feed = ProcessLogFeed("P-1", source, interval=60)

    feed.tick()
    feed.tick()

    assert source.calls == 1
    assert feed.mode == FeedMode.REPLAYING


def test_redelivery_replaces_events(event_factory):
    feed = ProcessLogFeed("P-1")

    feed.deliver(event_factory(5))
    feed.deliver(event_factory(3))

    assert len(feed.events) == 3
    assert feed.mode == FeedMode.REPLAYING


def test_deliver_without_polling(event_factory):
    feed = ProcessLogFeed("P-1")
    listener_modes = []
    feed.subscribe(lambda changed: listener_modes.append(changed.mode))

    feed.deliver(event_factory(2))

    assert listener_modes == [FeedMode.REPLAYING]
    assert feed.wait(0)
    assert feed.history == [FeedMode.IDLE, FeedMode.REPLAYING]


def test_failed_check_stalls_and_recovers(event_factory):
    error = UnavailableError("backend down")
    feed = ProcessLogFeed("P-1", ScriptedSource(error, None, event_factory(1)), interval=60)

    with pytest.raises(UnavailableError):
        feed.tick()
    assert feed.mode == FeedMode.STALLED
    assert feed.last_error is error

    assert feed.tick() == FeedMode.POLLING
    assert feed.last_error is None

    assert feed.tick() == FeedMode.REPLAYING
    assert feed.history == [FeedMode.IDLE, FeedMode.STALLED, FeedMode.POLLING, FeedMode.REPLAYING]


def test_tick_without_source_is_a_configuration_error():
    feed = ProcessLogFeed("P-1")

    with pytest.raises(ConfigurationError):
        feed.tick()


def test_start_with_immediate_bundle_does_not_poll(event_factory):
    feed = ProcessLogFeed("P-1", ScriptedSource(event_factory(3)), interval=60)

    assert feed.start() == FeedMode.REPLAYING
    assert not feed.is_polling


def test_start_polls_until_bundle_arrives(event_factory):
    source = ScriptedSource(None, None, event_factory(5))
    with ProcessLogFeed("P-1", source, interval=0.01) as feed:
        assert feed.start() == FeedMode.POLLING
        assert feed.wait(timeout=5)

    assert feed.mode == FeedMode.REPLAYING
    assert len(feed.events) == 5
    assert source.calls == 3
    assert feed.history[-1] == FeedMode.REPLAYING


def test_polling_continues_after_stall(event_factory):
    source = ScriptedSource(UnavailableError("down"), UnavailableError("down"), event_factory(1))
    feed = ProcessLogFeed("P-1", source, interval=0.01)

    assert feed.start() == FeedMode.STALLED
    assert feed.wait(timeout=5)
    feed.stop()

    assert FeedMode.STALLED in feed.history
    assert feed.mode == FeedMode.REPLAYING


def test_stop_is_idempotent():
    feed = ProcessLogFeed("P-1", ScriptedSource(), interval=60)
    feed.start()
    assert feed.is_polling

    feed.stop()
    feed.stop()

    assert not feed.is_polling


def test_start_twice_keeps_one_task():
    source = ScriptedSource()
    feed = ProcessLogFeed("P-1", source, interval=60)

    feed.start()
    feed.start()
    feed.stop()

    assert source.calls == 1


def test_unsubscribe_stops_notifications(event_factory):
    feed = ProcessLogFeed("P-1")
    seen = []
    unsubscribe = feed.subscribe(lambda changed: seen.append(len(changed)))

    feed.deliver(event_factory(1))
    unsubscribe()
    unsubscribe()
    feed.deliver(event_factory(2))

    assert seen == [1]


def test_wait_times_out_while_pending():
    feed = ProcessLogFeed("P-1", ScriptedSource(), interval=60)

    assert not feed.wait(timeout=0.01)


def test_polling_task_runs_until_cancelled():
    ticks = threading.Semaphore(0)
    task = PollingTask(0.01, ticks.release)

    task.start()
    assert ticks.acquire(timeout=5)
    assert ticks.acquire(timeout=5)
    task.cancel()
    task.cancel()

    assert not task.running


def test_polling_task_can_cancel_itself():
    done = threading.Event()
    holder = {}

    def callback():
        holder["task"].cancel()
        done.set()

    holder["task"] = PollingTask(0.01, callback)
    holder["task"].start()

    assert done.wait(timeout=5)
    assert not holder["task"].running


def test_polling_task_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        PollingTask(0, lambda: None)


def test_unexpected_fetch_error_stalls_and_polling_recovers(event_factory):
    source = ScriptedSource(None, ValueError("bad payload"), event_factory(5))
    feed = ProcessLogFeed("P-1", source, interval=0.01)

    feed.start()
    assert feed.wait(timeout=5)
    feed.stop()

    assert feed.mode == FeedMode.REPLAYING
    assert len(feed.events) == 5
    assert FeedMode.STALLED in feed.history
    assert source.calls == 3


def test_unexpected_fetch_error_is_recorded_on_tick():
    error = ValueError("bad payload")
    feed = ProcessLogFeed("P-1", ScriptedSource(error), interval=60)

    with pytest.raises(ValueError):
        feed.tick()

    assert feed.mode == FeedMode.STALLED
    assert feed.last_error is error


def test_failing_listener_does_not_stop_polling(event_factory):
    feed = ProcessLogFeed("P-1", ScriptedSource(None, None, event_factory(5)), interval=0.01)
    calls = []

    def broken_view(changed):
        calls.append(changed.mode)
        if len(calls) > 1:
            raise RuntimeError("view went away")

    feed.subscribe(broken_view)
    feed.start()
    assert feed.wait(timeout=5)
    feed.stop()

    assert feed.mode == FeedMode.REPLAYING
    assert len(feed.events) == 5
    assert calls[-1] == FeedMode.REPLAYING


def test_start_without_source_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        ProcessLogFeed("P-1").start()


def test_delivery_during_first_check_leaves_no_timer(event_factory):
    holder = {}

    def delivered_meanwhile(job_id):
        holder["feed"].deliver(event_factory(2))
        return None

    feed = ProcessLogFeed("P-1", delivered_meanwhile, interval=0.01)
    holder["feed"] = feed

    assert feed.start() == FeedMode.REPLAYING
    assert not feed.is_polling
    assert len(feed.events) == 2


def test_polling_task_survives_failing_callback():
    ticks = threading.Semaphore(0)
    outcomes = [RuntimeError("boom")]

    def callback():
        ticks.release()
        if outcomes:
            raise outcomes.pop()

    task = PollingTask(0.01, callback)
    task.start()
    assert ticks.acquire(timeout=5)
    assert ticks.acquire(timeout=5)
    task.cancel()
