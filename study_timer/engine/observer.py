"""
Observer contract and notification plumbing for the timer engine.

Observers are attached and detached at any time without affecting the
scheduler. Every callback runs behind an error-isolation boundary: an
exception raised by an observer is logged and recorded, never propagated
into the engine.
"""

import queue
import threading
from collections import deque
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..errors import ObserverNotificationError
from ..logging.config import get_logger
from ..session.models import Phase, SessionPlan

if TYPE_CHECKING:
    from .models import EngineSnapshot

logger = get_logger(__name__)

ON_TICK = "on_tick"
ON_PHASE_COMPLETE = "on_phase_complete"
ON_SESSION_COMPLETE = "on_session_complete"
ON_SNAPSHOT = "on_snapshot"

Notification = tuple[str, tuple[Any, ...]]


class TimerObserver:
    """
    Notification sink for timer lifecycle events.

    Subclasses override only the callbacks they care about; the defaults do
    nothing.
    """

    def on_tick(self, remaining_seconds: int, current_phase_index: int) -> None:
        """Called after every processed tick with the post-decrement values."""

    def on_phase_complete(self, phase: Phase) -> None:
        """Called when a phase counts down to zero."""

    def on_session_complete(self, plan: SessionPlan) -> None:
        """Called once when the final phase of a plan completes."""

    def on_snapshot(self, snapshot: "EngineSnapshot") -> None:
        """Called on attach with the current engine state."""


class CallbackObserver(TimerObserver):
    """Adapts plain callables to the observer contract."""

    def __init__(
        self,
        on_tick: Optional[Callable[[int, int], None]] = None,
        on_phase_complete: Optional[Callable[[Phase], None]] = None,
        on_session_complete: Optional[Callable[[SessionPlan], None]] = None,
        on_snapshot: Optional[Callable[["EngineSnapshot"], None]] = None,
    ):
        self._on_tick = on_tick
        self._on_phase_complete = on_phase_complete
        self._on_session_complete = on_session_complete
        self._on_snapshot = on_snapshot

    def on_tick(self, remaining_seconds: int, current_phase_index: int) -> None:
        if self._on_tick:
            self._on_tick(remaining_seconds, current_phase_index)

    def on_phase_complete(self, phase: Phase) -> None:
        if self._on_phase_complete:
            self._on_phase_complete(phase)

    def on_session_complete(self, plan: SessionPlan) -> None:
        if self._on_session_complete:
            self._on_session_complete(plan)

    def on_snapshot(self, snapshot: "EngineSnapshot") -> None:
        if self._on_snapshot:
            self._on_snapshot(snapshot)


class NotificationDispatcher:
    """Delivers notification batches on a dedicated worker thread."""

    def __init__(self, deliver: Callable[[list[Notification]], None]):
        self._deliver = deliver
        self._queue: "queue.Queue[Optional[list[Notification]]]" = queue.Queue()
        self._thread = threading.Thread(
            target=self._run, name="timer-notifications", daemon=True
        )
        self._thread.start()

    def submit(self, notifications: list[Notification]) -> None:
        self._queue.put(notifications)

    def flush(self) -> None:
        """Block until every submitted batch has been delivered."""
        self._queue.join()

    def close(self, timeout: float = 1.0) -> None:
        self._queue.put(None)
        self._thread.join(timeout)

    def _run(self) -> None:
        while True:
            batch = self._queue.get()
            try:
                if batch is None:
                    return
                self._deliver(batch)
            finally:
                self._queue.task_done()


class ObserverRegistry:
    """Attached observers plus isolated (optionally asynchronous) delivery."""

    def __init__(self, async_notifications: bool = False, failure_history: int = 100):
        self._observers: list[TimerObserver] = []
        self._lock = threading.Lock()
        self.failures: deque[ObserverNotificationError] = deque(maxlen=failure_history)
        self._dispatcher: Optional[NotificationDispatcher] = None
        if async_notifications:
            self._dispatcher = NotificationDispatcher(self._deliver)

    def __len__(self) -> int:
        with self._lock:
            return len(self._observers)

    def __contains__(self, observer: object) -> bool:
        with self._lock:
            return observer in self._observers

    def attach(self, observer: TimerObserver) -> bool:
        """Attach an observer; returns False if it was already attached."""
        with self._lock:
            if observer in self._observers:
                return False
            self._observers.append(observer)
        logger.debug("Observer attached", observer=type(observer).__name__)
        return True

    def detach(self, observer: TimerObserver) -> bool:
        """Detach an observer; returns False if it was not attached."""
        with self._lock:
            if observer not in self._observers:
                return False
            self._observers.remove(observer)
        logger.debug("Observer detached", observer=type(observer).__name__)
        return True

    def dispatch(self, notifications: list[Notification]) -> None:
        """Deliver a batch of notifications to all attached observers, in order."""
        if not notifications:
            return
        if self._dispatcher is not None:
            self._dispatcher.submit(notifications)
        else:
            self._deliver(notifications)

    def notify_one(self, observer: TimerObserver, event_name: str, *args: Any) -> None:
        """Deliver a single notification to one observer, synchronously."""
        self._call(observer, event_name, args)

    def flush(self) -> None:
        if self._dispatcher is not None:
            self._dispatcher.flush()

    def close(self) -> None:
        if self._dispatcher is not None:
            self._dispatcher.close()
            self._dispatcher = None

    def _deliver(self, notifications: list[Notification]) -> None:
        with self._lock:
            observers = list(self._observers)

        for event_name, args in notifications:
            for observer in observers:
                self._call(observer, event_name, args)

    def _call(self, observer: TimerObserver, event_name: str, args: tuple[Any, ...]) -> None:
        try:
            getattr(observer, event_name)(*args)
        except Exception as e:
            failure = ObserverNotificationError(
                f"Observer {type(observer).__name__}.{event_name} failed: {e}",
                observer=type(observer).__name__,
                event_name=event_name,
                context={"error_type": type(e).__name__},
            )
            self.failures.append(failure)
            logger.error(
                "Observer notification failed",
                observer=failure.observer,
                event_name=event_name,
                error=str(e),
                exc_info=True,
            )
