"""Tests for the timer engine state machine."""

import pytest

from study_timer.engine.models import TimerStatus
from study_timer.engine.observer import CallbackObserver
from study_timer.engine.timer_engine import TimerEngine
from study_timer.errors import InvalidStateError
from study_timer.session.builder import SessionBuilder
from study_timer.session.models import SessionConfig


class TestStart:
    """Test start transition."""

    def test_start_from_idle(self, engine, single_phase_plan):
        engine.start(single_phase_plan)
        snapshot = engine.snapshot()

        assert snapshot.status == TimerStatus.RUNNING
        assert snapshot.active_plan is single_phase_plan
        assert snapshot.current_phase_index == 0
        assert snapshot.remaining_seconds == 10

    def test_start_while_running_rejected(self, engine, single_phase_plan, two_cycle_plan):
        """A second start is rejected and the state is left unchanged."""
        engine.start(single_phase_plan)
        engine.tick()
        before = engine.snapshot()

        with pytest.raises(InvalidStateError) as exc_info:
            engine.start(two_cycle_plan)

        assert exc_info.value.current_state == "running"
        assert exc_info.value.attempted_transition == "start"
        assert engine.snapshot() == before

    def test_start_while_paused_rejected(self, engine, single_phase_plan):
        engine.start(single_phase_plan)
        engine.pause()

        with pytest.raises(InvalidStateError):
            engine.start(single_phase_plan)
        assert engine.status == TimerStatus.PAUSED


class TestTick:
    """Test countdown and phase transitions."""

    def test_single_phase_completes_after_duration(self, engine, recorder, single_phase_plan):
        """N ticks for an N-second plan completes with one session notification."""
        engine.start(single_phase_plan)

        for _ in range(9):
            engine.tick()
        assert engine.status == TimerStatus.RUNNING
        assert recorder.sessions_completed == []

        engine.tick()

        assert recorder.sessions_completed == [single_phase_plan]
        assert len(recorder.phases_completed) == 1
        snapshot = engine.snapshot()
        assert snapshot.status == TimerStatus.IDLE
        assert snapshot.active_plan is None
        assert snapshot.sessions_completed == 1

    def test_status_completed_during_notification(self, engine, single_phase_plan):
        """Observers see COMPLETED while the session completion is delivered."""
        seen = []
        engine.attach_observer(CallbackObserver(
            on_session_complete=lambda plan: seen.append(engine.snapshot().status)
        ))

        engine.start(single_phase_plan)
        engine.advance(10)

        assert seen == [TimerStatus.COMPLETED]
        assert engine.status == TimerStatus.IDLE

    def test_remaining_never_negative_and_non_increasing(self, engine, recorder, single_phase_plan):
        engine.start(single_phase_plan)
        engine.advance(25)

        remaining = [r for r, _ in recorder.ticks]
        assert remaining == list(range(9, -1, -1))
        assert all(r >= 0 for r in remaining)

    def test_notification_order_at_session_end(self, engine, recorder, single_phase_plan):
        engine.start(single_phase_plan)
        engine.advance(10)

        assert recorder.events[-3:] == ["tick", "phase_complete", "session_complete"]

    def test_automatic_phase_transition(self, engine, recorder, pomodoro_config):
        """After the first 1500 ticks the break starts with no pause."""
        plan = SessionBuilder().build(pomodoro_config)
        engine.start(plan)

        engine.advance(1500)
        snapshot = engine.snapshot()

        assert len(recorder.phases_completed) == 1
        assert recorder.phases_completed[0].is_break is False
        assert snapshot.status == TimerStatus.RUNNING
        assert snapshot.current_phase_index == 1
        assert snapshot.remaining_seconds == 300
        assert snapshot.current_phase.is_break is True

    def test_full_pomodoro_session(self, engine, recorder, pomodoro_config):
        plan = SessionBuilder().build(pomodoro_config)
        engine.start(plan)

        engine.advance(plan.total_seconds)

        assert len(recorder.phases_completed) == 8
        assert recorder.sessions_completed == [plan]
        assert len(recorder.ticks) == plan.total_seconds
        assert engine.status == TimerStatus.IDLE

    def test_ticks_ignored_when_idle(self, engine, recorder):
        engine.advance(5)

        assert recorder.ticks == []
        assert engine.status == TimerStatus.IDLE

    def test_ticks_ignored_when_paused(self, engine, recorder, single_phase_plan):
        engine.start(single_phase_plan)
        engine.tick()
        engine.pause()

        engine.advance(3)

        assert engine.snapshot().remaining_seconds == 9
        assert len(recorder.ticks) == 1

    def test_extra_ticks_after_completion_ignored(self, engine, recorder, single_phase_plan):
        """A batch longer than the plan stops at completion."""
        engine.start(single_phase_plan)
        engine.advance(50)

        assert len(recorder.ticks) == 10
        assert len(recorder.sessions_completed) == 1


class TestPauseResume:
    """Test pause and resume transitions."""

    def test_pause_resume_preserves_state(self, engine, two_cycle_plan):
        """Pause followed by resume only changes status."""
        engine.start(two_cycle_plan)
        engine.advance(4)
        before = engine.snapshot()

        engine.pause()
        paused = engine.snapshot()
        engine.resume()
        after = engine.snapshot()

        assert paused.status == TimerStatus.PAUSED
        assert after.status == TimerStatus.RUNNING
        for snapshot in (paused, after):
            assert snapshot.remaining_seconds == before.remaining_seconds
            assert snapshot.current_phase_index == before.current_phase_index

    def test_pause_from_idle_rejected(self, engine):
        with pytest.raises(InvalidStateError) as exc_info:
            engine.pause()

        assert exc_info.value.current_state == "idle"
        assert engine.status == TimerStatus.IDLE

    def test_resume_while_running_rejected(self, engine, single_phase_plan):
        engine.start(single_phase_plan)

        with pytest.raises(InvalidStateError):
            engine.resume()
        assert engine.status == TimerStatus.RUNNING

    def test_pause_twice_rejected(self, engine, single_phase_plan):
        engine.start(single_phase_plan)
        engine.pause()

        with pytest.raises(InvalidStateError):
            engine.pause()


class TestCancel:
    """Test cancellation."""

    @pytest.mark.parametrize("pause_first", [False, True])
    def test_cancel_resets_to_idle(self, engine, recorder, two_cycle_plan, pause_first):
        """Cancel from RUNNING or PAUSED clears the session without completion."""
        engine.start(two_cycle_plan)
        engine.advance(4)
        if pause_first:
            engine.pause()

        engine.cancel()
        snapshot = engine.snapshot()

        assert snapshot.status == TimerStatus.IDLE
        assert snapshot.active_plan is None
        assert snapshot.remaining_seconds == 0
        assert recorder.sessions_completed == []
        assert snapshot.sessions_completed == 0

    def test_cancel_is_idempotent(self, engine, single_phase_plan):
        engine.cancel()
        engine.start(single_phase_plan)
        engine.cancel()
        engine.cancel()

        assert engine.status == TimerStatus.IDLE

    def test_ticks_after_cancel_ignored(self, engine, recorder, single_phase_plan):
        engine.start(single_phase_plan)
        engine.cancel()
        engine.advance(20)

        assert recorder.ticks == []
        assert recorder.phases_completed == []


class TestRepeat:
    """Starting the same plan again after completion."""

    def test_start_same_plan_again(self, engine, recorder, single_phase_plan):
        engine.start(single_phase_plan)
        engine.advance(10)

        engine.start(single_phase_plan)
        assert engine.snapshot().remaining_seconds == 10

        engine.advance(10)
        assert len(recorder.sessions_completed) == 2
        assert engine.snapshot().sessions_completed == 2


class TestClockDrivenTicks:
    """Ticks derived from elapsed clock time."""

    def test_pause_time_not_counted(self, engine, fake_clock, recorder, single_phase_plan):
        """Pause with 10s left, 5s pass, resume, completion exactly at tick 10."""
        engine.start(single_phase_plan)
        engine.pause()

        fake_clock.advance(5)
        assert engine.poll() == 0

        engine.resume()
        fake_clock.advance(9)
        assert engine.poll() == 9
        assert engine.snapshot().remaining_seconds == 1
        assert recorder.sessions_completed == []

        fake_clock.advance(1)
        assert engine.poll() == 1
        assert len(recorder.sessions_completed) == 1
        assert engine.status == TimerStatus.IDLE

    def test_stall_catch_up_applies_every_tick(self, engine, fake_clock, recorder, two_cycle_plan):
        """A multi-second stall is accounted tick by tick across phases."""
        engine.start(two_cycle_plan)

        fake_clock.advance(4.5)
        assert engine.poll() == 4

        snapshot = engine.snapshot()
        assert snapshot.current_phase_index == 1
        assert snapshot.remaining_seconds == 1
        assert recorder.ticks == [(2, 0), (1, 0), (0, 0), (1, 1)]
        assert len(recorder.phases_completed) == 1

    def test_fractional_remainder_carried(self, engine, fake_clock, single_phase_plan):
        engine.start(single_phase_plan)

        fake_clock.advance(0.5)
        assert engine.poll() == 0
        fake_clock.advance(0.75)
        assert engine.poll() == 1
        fake_clock.advance(0.75)
        assert engine.poll() == 1

        assert engine.snapshot().remaining_seconds == 8

    def test_sub_second_progress_discarded_on_pause(self, engine, fake_clock, single_phase_plan):
        engine.start(single_phase_plan)
        fake_clock.advance(0.75)
        engine.pause()
        engine.resume()

        fake_clock.advance(0.5)
        assert engine.poll() == 0
        assert engine.snapshot().remaining_seconds == 10


class TestEngineConstruction:

    def test_default_engine_is_idle(self):
        timer_engine = TimerEngine(threaded=False)
        snapshot = timer_engine.snapshot()

        assert snapshot.status == TimerStatus.IDLE
        assert snapshot.active_plan is None
        assert snapshot.current_phase is None
        assert timer_engine.wait_idle(timeout=0) is True

    def test_built_plan_runs(self, engine, recorder):
        plan = SessionBuilder().build(SessionConfig(total_seconds=3, cycles=5))
        engine.start(plan)
        engine.advance(3)

        assert len(recorder.sessions_completed) == 1


class TestCompletionRace:
    """A completing tick never stops a session started after it."""

    def test_stale_completion_keeps_new_ticker(self, engine, monkeypatch,
                                               single_phase_plan, two_cycle_plan):
        original_stop = engine.scheduler.stop
        raced = []

        def stop_after_restart(generation=None):
            # Another caller cancels and starts a new session in the window
            # between completion and the ticker being stopped
            if generation is not None and not raced:
                raced.append(generation)
                engine.cancel()
                engine.start(two_cycle_plan)
            original_stop(generation)

        monkeypatch.setattr(engine.scheduler, "stop", stop_after_restart)

        engine.start(single_phase_plan)
        engine.advance(10)

        assert raced
        assert engine.scheduler.is_running is True
        snapshot = engine.snapshot()
        assert snapshot.status == TimerStatus.RUNNING
        assert snapshot.active_plan is two_cycle_plan
        assert snapshot.remaining_seconds == 3
