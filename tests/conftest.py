"""Pytest configuration and shared fixtures."""

import pytest
from typing import Any, Dict

from study_timer.engine.observer import TimerObserver
from study_timer.engine.timer_engine import TimerEngine
from study_timer.session.models import Phase, SessionConfig, SessionPlan


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingObserver(TimerObserver):
    """Records every notification in arrival order."""

    def __init__(self):
        self.events = []
        self.ticks = []
        self.phases_completed = []
        self.sessions_completed = []
        self.snapshots = []

    def on_tick(self, remaining_seconds, current_phase_index):
        self.ticks.append((remaining_seconds, current_phase_index))
        self.events.append("tick")

    def on_phase_complete(self, phase):
        self.phases_completed.append(phase)
        self.events.append("phase_complete")

    def on_session_complete(self, plan):
        self.sessions_completed.append(plan)
        self.events.append("session_complete")

    def on_snapshot(self, snapshot):
        self.snapshots.append(snapshot)
        self.events.append("snapshot")


@pytest.fixture
def fake_clock() -> FakeClock:
    """Manually advanced clock starting at an arbitrary monotonic value."""
    return FakeClock()


@pytest.fixture
def recorder() -> RecordingObserver:
    """Observer that records all notifications."""
    return RecordingObserver()


@pytest.fixture
def engine(fake_clock, recorder):
    """Unthreaded engine driven by tick()/poll(), with a recorder attached."""
    timer_engine = TimerEngine(clock=fake_clock, threaded=False)
    timer_engine.attach_observer(recorder)
    yield timer_engine
    timer_engine.shutdown()


@pytest.fixture
def single_phase_plan() -> SessionPlan:
    """Ten-second single study phase."""
    return SessionPlan(
        name="Quick Focus",
        phases=(Phase(name="Study Time", duration_seconds=10),),
    )


@pytest.fixture
def two_cycle_plan() -> SessionPlan:
    """Two short study/break cycles with a trailing break."""
    study = Phase(name="Study Time", duration_seconds=3)
    rest = Phase(name="Break Time", duration_seconds=2, is_break=True)
    return SessionPlan(name="Short Cycles", phases=(study, rest, study, rest))


@pytest.fixture
def pomodoro_config() -> SessionConfig:
    """Four-cycle Pomodoro: 25 minutes study, 5 minutes break."""
    return SessionConfig(
        total_seconds=1500,
        include_break=True,
        break_seconds=300,
        cycles=4,
        label="Pomodoro",
    )


@pytest.fixture
def storage_overrides(tmp_path) -> Dict[str, Any]:
    """Settings overrides that keep SQLite files inside tmp_path."""
    return {
        "storage": {
            "presets_db_path": str(tmp_path / "presets.db"),
            "events_db_path": str(tmp_path / "events.db"),
        }
    }
