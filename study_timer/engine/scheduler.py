"""
Periodic ticker for the timer engine.

The ticker wakes on a fixed cadence, measures elapsed time on a monotonic
clock, and reports the number of whole ticks that have elapsed since the
last accounted tick. The fractional remainder is carried forward, so after
a host stall the engine receives every elapsed tick and no tick is lost or
counted twice.
"""

import threading
from typing import Callable, Optional

from ..logging.config import get_logger
from ..utils.time import Clock, monotonic_clock

logger = get_logger(__name__)


class TickScheduler:
    """Drives a callback with the number of whole elapsed ticks."""

    def __init__(
        self,
        on_ticks: Callable[[int], None],
        interval: float = 1.0,
        clock: Clock = monotonic_clock,
    ):
        if interval <= 0:
            raise ValueError("Tick interval must be positive")

        self.interval = interval
        self.clock = clock
        self._on_ticks = on_ticks
        self._lock = threading.Lock()
        self._last_mark: Optional[float] = None
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._generation = 0

    @property
    def is_running(self) -> bool:
        return self._stop_event is not None and not self._stop_event.is_set()

    @property
    def generation(self) -> int:
        """Incremented on every start; identifies the current run."""
        with self._lock:
            return self._generation

    def start(self, run_thread: bool = True) -> int:
        """
        Begin accounting from now.

        Args:
            run_thread: Spawn the background ticker thread. When False the
                owner drives the ticker by calling poll().

        Returns:
            Generation of the new run
        """
        self.stop()

        with self._lock:
            self._generation += 1
            generation = self._generation
            self._last_mark = self.clock()
            stop_event = threading.Event()
            self._stop_event = stop_event

        if run_thread:
            thread = threading.Thread(
                target=self._run, args=(stop_event,), name="timer-ticker", daemon=True
            )
            self._thread = thread
            thread.start()

        logger.debug("Ticker started", interval=self.interval, threaded=run_thread,
                     generation=generation)
        return generation

    def stop(self, generation: Optional[int] = None) -> None:
        """
        Stop ticking; any partially elapsed tick is discarded.

        Args:
            generation: Only stop if this run is still the current one
        """
        with self._lock:
            if generation is not None and generation != self._generation:
                return
            stop_event = self._stop_event
            thread = self._thread
            self._stop_event = None
            self._thread = None
            self._last_mark = None

        if stop_event is None:
            return

        stop_event.set()

        # The ticker thread may stop itself from inside the callback
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval * 2 + 1.0)

        logger.debug("Ticker stopped")

    def poll(self) -> int:
        """
        Account for elapsed time and deliver whole ticks.

        Returns:
            Number of ticks delivered
        """
        with self._lock:
            if self._last_mark is None:
                return 0
            elapsed = self.clock() - self._last_mark
            ticks = int(elapsed // self.interval)
            if ticks <= 0:
                return 0
            self._last_mark += ticks * self.interval

        if ticks > 1:
            logger.debug("Ticker catching up", ticks=ticks, elapsed=elapsed)

        self._on_ticks(ticks)
        return ticks

    def _next_wait(self) -> float:
        with self._lock:
            if self._last_mark is None:
                return self.interval
            elapsed = self.clock() - self._last_mark
        return max(0.0, self.interval - (elapsed % self.interval))

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._next_wait()):
            try:
                self.poll()
            except Exception:
                # Keep ticking; the engine reports its own failures
                logger.exception("Ticker callback failed")
