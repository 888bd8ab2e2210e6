"""Tests for the tick scheduler."""

import threading

import pytest

from study_timer.engine.scheduler import TickScheduler


class TickSink:
    """Collects tick batches."""

    def __init__(self):
        self.batches = []
        self.delivered = threading.Event()

    def __call__(self, ticks):
        self.batches.append(ticks)
        self.delivered.set()


@pytest.fixture
def sink():
    return TickSink()


@pytest.fixture
def scheduler(sink, fake_clock):
    ticker = TickScheduler(on_ticks=sink, interval=1.0, clock=fake_clock)
    yield ticker
    ticker.stop()


class TestPolling:
    """Test elapsed-time accounting via poll()."""

    def test_poll_before_start(self, scheduler, sink, fake_clock):
        fake_clock.advance(5)

        assert scheduler.poll() == 0
        assert sink.batches == []
        assert scheduler.is_running is False

    def test_whole_ticks_delivered(self, scheduler, sink, fake_clock):
        scheduler.start(run_thread=False)
        assert scheduler.is_running is True

        fake_clock.advance(1)
        assert scheduler.poll() == 1
        fake_clock.advance(1)
        assert scheduler.poll() == 1

        assert sink.batches == [1, 1]

    def test_no_tick_before_interval(self, scheduler, sink, fake_clock):
        scheduler.start(run_thread=False)
        fake_clock.advance(0.5)

        assert scheduler.poll() == 0
        assert sink.batches == []

    def test_catch_up_after_stall(self, scheduler, sink, fake_clock):
        """A stall of several intervals is delivered as one batch of all ticks."""
        scheduler.start(run_thread=False)
        fake_clock.advance(7.25)

        assert scheduler.poll() == 7
        assert sink.batches == [7]

    def test_remainder_carried_forward(self, scheduler, sink, fake_clock):
        scheduler.start(run_thread=False)

        fake_clock.advance(2.5)
        scheduler.poll()
        fake_clock.advance(0.5)
        scheduler.poll()

        assert sink.batches == [2, 1]

    def test_no_tick_counted_twice(self, scheduler, sink, fake_clock):
        scheduler.start(run_thread=False)
        fake_clock.advance(3)
        scheduler.poll()

        assert scheduler.poll() == 0
        assert sum(sink.batches) == 3

    def test_custom_interval(self, sink, fake_clock):
        ticker = TickScheduler(on_ticks=sink, interval=0.25, clock=fake_clock)
        ticker.start(run_thread=False)
        fake_clock.advance(1)

        assert ticker.poll() == 4
        ticker.stop()


class TestStartStop:
    """Test start/stop semantics."""

    def test_stop_discards_partial_tick(self, scheduler, sink, fake_clock):
        scheduler.start(run_thread=False)
        fake_clock.advance(0.75)
        scheduler.stop()

        scheduler.start(run_thread=False)
        fake_clock.advance(0.5)

        assert scheduler.poll() == 0
        assert sink.batches == []

    def test_poll_after_stop(self, scheduler, sink, fake_clock):
        scheduler.start(run_thread=False)
        scheduler.stop()
        fake_clock.advance(10)

        assert scheduler.poll() == 0
        assert scheduler.is_running is False

    def test_stop_is_idempotent(self, scheduler):
        scheduler.stop()
        scheduler.start(run_thread=False)
        scheduler.stop()
        scheduler.stop()

        assert scheduler.is_running is False

    @pytest.mark.parametrize("interval", [0, -1.0])
    def test_invalid_interval(self, sink, interval):
        with pytest.raises(ValueError):
            TickScheduler(on_ticks=sink, interval=interval)


class TestThreadedTicker:
    """Background thread delivers ticks on its own."""

    def test_thread_delivers_ticks(self, sink):
        ticker = TickScheduler(on_ticks=sink, interval=0.01)
        ticker.start()
        try:
            assert sink.delivered.wait(timeout=2.0)
        finally:
            ticker.stop()

        assert sum(sink.batches) >= 1

    def test_callback_failure_does_not_kill_thread(self):
        calls = []
        second_call = threading.Event()

        def flaky(ticks):
            calls.append(ticks)
            if len(calls) == 1:
                raise RuntimeError("boom")
            second_call.set()

        ticker = TickScheduler(on_ticks=flaky, interval=0.01)
        ticker.start()
        try:
            assert second_call.wait(timeout=2.0)
        finally:
            ticker.stop()

    def test_stop_from_callback(self):
        """The ticker thread may stop itself without deadlocking."""
        stopped = threading.Event()
        ticker = None

        def stop_self(ticks):
            ticker.stop()
            stopped.set()

        ticker = TickScheduler(on_ticks=stop_self, interval=0.01)
        ticker.start()

        assert stopped.wait(timeout=2.0)
        assert ticker.is_running is False


class TestGenerations:
    """Stop requests tied to an earlier run are ignored."""

    def test_start_returns_new_generation(self, scheduler):
        first = scheduler.start(run_thread=False)
        second = scheduler.start(run_thread=False)

        assert second == first + 1
        assert scheduler.generation == second

    def test_stale_stop_ignored(self, scheduler, sink, fake_clock):
        stale = scheduler.start(run_thread=False)
        scheduler.stop()
        scheduler.start(run_thread=False)

        scheduler.stop(generation=stale)

        assert scheduler.is_running is True
        fake_clock.advance(1)
        assert scheduler.poll() == 1

    def test_current_generation_stops(self, scheduler):
        current = scheduler.start(run_thread=False)

        scheduler.stop(generation=current)

        assert scheduler.is_running is False
