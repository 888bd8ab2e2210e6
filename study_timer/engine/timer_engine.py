"""
Timer engine state machine.

States: IDLE -> RUNNING <-> PAUSED -> COMPLETED -> IDLE.

The engine is the sole owner and mutator of its runtime state. Transitions
are synchronous; observers are notified after the state lock is released so
a slow or failing observer can never stall or corrupt the countdown.
"""

import threading
from typing import Optional

from ..config.defaults import EngineParams
from ..errors import InvalidStateError
from ..logging.config import get_state_logger, log_state_transition
from ..session.models import SessionPlan
from ..utils.time import Clock, monotonic_clock
from .models import EngineSnapshot, TimerStatus
from .observer import (
    ON_PHASE_COMPLETE,
    ON_SESSION_COMPLETE,
    ON_SNAPSHOT,
    ON_TICK,
    Notification,
    ObserverRegistry,
    TimerObserver,
)
from .scheduler import TickScheduler

state_logger = get_state_logger(__name__)


class TimerEngine:
    """
    Single-session countdown engine.

    Drives one SessionPlan at a time through its phases, one tick per
    second, and reports ticks and phase/session completion to observers.
    """

    def __init__(
        self,
        params: Optional[EngineParams] = None,
        clock: Clock = monotonic_clock,
        threaded: bool = True,
    ) -> None:
        """
        Args:
            params: Engine parameters (tick cadence, notification mode)
            clock: Monotonic clock used for elapsed-time accounting
            threaded: Run the background ticker thread. When False the owner
                drives time through poll(), tick() or advance(). A threaded
                engine always delivers notifications on the dispatcher
                thread so observers never run on the ticker.
        """
        self.params = params or EngineParams()
        self.logger = state_logger
        self.threaded = threaded

        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        self._status = TimerStatus.IDLE
        self._plan: Optional[SessionPlan] = None
        self._phase_index = 0
        self._remaining = 0
        self._sessions_completed = 0
        self._session_token = 0

        self.observers = ObserverRegistry(
            async_notifications=threaded or self.params.async_notifications
        )
        self.scheduler = TickScheduler(
            on_ticks=self.advance,
            interval=self.params.tick_interval_seconds,
            clock=clock,
        )

    # ----- Read access -----

    @property
    def status(self) -> TimerStatus:
        with self._lock:
            return self._status

    def snapshot(self) -> EngineSnapshot:
        """Immutable view of the current state."""
        with self._lock:
            return self._snapshot_locked()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until the engine is IDLE; returns False on timeout."""
        with self._idle:
            return self._idle.wait_for(lambda: self._status == TimerStatus.IDLE, timeout)

    def _snapshot_locked(self) -> EngineSnapshot:
        return EngineSnapshot(
            status=self._status,
            current_phase_index=self._phase_index,
            remaining_seconds=self._remaining,
            active_plan=self._plan,
            sessions_completed=self._sessions_completed,
        )

    # ----- Observers -----

    def attach_observer(self, observer: TimerObserver) -> None:
        """Attach an observer and immediately send it the current snapshot."""
        self.observers.attach(observer)
        self.observers.notify_one(observer, ON_SNAPSHOT, self.snapshot())

    def detach_observer(self, observer: TimerObserver) -> bool:
        """Detach an observer. The countdown keeps running."""
        return self.observers.detach(observer)

    # ----- Transitions -----

    def start(self, plan: SessionPlan) -> None:
        """
        Start a session from IDLE.

        Raises:
            InvalidStateError: If a session is already running, paused or
                completing
        """
        with self._lock:
            self._require(TimerStatus.IDLE, "start")

            self._plan = plan
            self._phase_index = 0
            self._remaining = plan.phases[0].duration_seconds
            self._session_token += 1
            self._set_status(TimerStatus.RUNNING, "start", context={
                "phase_count": plan.phase_count,
                "total_seconds": plan.total_seconds,
                "technique": plan.technique,
            })

        self.scheduler.start(run_thread=self.threaded)

    def pause(self) -> None:
        """
        Pause a running session, preserving phase and remaining time.

        Raises:
            InvalidStateError: If the engine is not RUNNING
        """
        with self._lock:
            self._require(TimerStatus.RUNNING, "pause")
            self._set_status(TimerStatus.PAUSED, "pause", context={
                "remaining_seconds": self._remaining,
                "current_phase_index": self._phase_index,
            })

        self.scheduler.stop()

    def resume(self) -> None:
        """
        Resume a paused session from the preserved remaining time.

        Raises:
            InvalidStateError: If the engine is not PAUSED
        """
        with self._lock:
            self._require(TimerStatus.PAUSED, "resume")
            self._set_status(TimerStatus.RUNNING, "resume", context={
                "remaining_seconds": self._remaining,
                "current_phase_index": self._phase_index,
            })

        self.scheduler.start(run_thread=self.threaded)

    def cancel(self) -> None:
        """Stop and discard the active session. No-op when already IDLE."""
        with self._lock:
            if self._status == TimerStatus.IDLE:
                return
            self._reset_locked("cancel")

        self.scheduler.stop()

    def poll(self) -> int:
        """Account for elapsed clock time; returns the number of ticks applied."""
        return self.scheduler.poll()

    def tick(self) -> None:
        """Process a single one-second tick."""
        self.advance(1)

    def advance(self, ticks: int) -> None:
        """
        Process ticks in order while the engine is RUNNING.

        Ticks arriving in any other state are ignored. Each tick produces its
        own notifications; nothing is coalesced.
        """
        notifications: list[Notification] = []
        completed_token: Optional[int] = None
        ticker_generation = 0

        with self._lock:
            for _ in range(ticks):
                if self._status != TimerStatus.RUNNING:
                    break
                if self._tick_locked(notifications):
                    completed_token = self._session_token
                    ticker_generation = self.scheduler.generation

        if completed_token is not None:
            # A session started since completion owns a newer ticker run
            self.scheduler.stop(generation=ticker_generation)

        self.observers.dispatch(notifications)

        if completed_token is not None:
            self._finish_session(completed_token)

    def shutdown(self) -> None:
        """Cancel any session and release the ticker and dispatcher threads."""
        self.cancel()
        self.observers.close()

    # ----- Internals -----

    def _tick_locked(self, notifications: list[Notification]) -> bool:
        """Apply one tick. Returns True when the session completed."""
        plan = self._plan
        if plan is None:
            return False

        self._remaining = max(0, self._remaining - 1)
        notifications.append((ON_TICK, (self._remaining, self._phase_index)))

        if self._remaining > 0:
            return False

        finished = plan.phases[self._phase_index]
        notifications.append((ON_PHASE_COMPLETE, (finished,)))

        if self._phase_index + 1 < plan.phase_count:
            self._phase_index += 1
            next_phase = plan.phases[self._phase_index]
            self._remaining = next_phase.duration_seconds
            self.logger.info(
                "Phase transition",
                plan_name=plan.name,
                finished_phase=finished.name,
                next_phase=next_phase.name,
                current_phase_index=self._phase_index,
                is_break=next_phase.is_break,
            )
            return False

        self._sessions_completed += 1
        self._set_status(TimerStatus.COMPLETED, "tick", context={
            "sessions_completed": self._sessions_completed,
        })
        notifications.append((ON_SESSION_COMPLETE, (plan,)))
        return True

    def _finish_session(self, token: int) -> None:
        """Return to IDLE once completion has been delivered."""
        with self._lock:
            if self._status == TimerStatus.COMPLETED and self._session_token == token:
                self._reset_locked("session_complete")

    def _reset_locked(self, trigger: str) -> None:
        self._set_status(TimerStatus.IDLE, trigger, context={
            "remaining_seconds": self._remaining,
            "current_phase_index": self._phase_index,
        })
        self._plan = None
        self._phase_index = 0
        self._remaining = 0
        self._idle.notify_all()

    def _require(self, expected: TimerStatus, transition: str) -> None:
        if self._status != expected:
            self.logger.warning(
                "Rejected state transition",
                current_state=self._status.value,
                attempted_transition=transition,
            )
            raise InvalidStateError(
                f"Cannot {transition} while {self._status.value}",
                current_state=self._status.value,
                attempted_transition=transition,
            )

    def _set_status(self, new_status: TimerStatus, trigger: str,
                    context: Optional[dict] = None) -> None:
        log_state_transition(
            self.logger,
            plan_name=self._plan.name if self._plan else None,
            from_state=self._status.value,
            to_state=new_status.value,
            trigger=trigger,
            context=context,
        )
        self._status = new_status
