#!/usr/bin/env python3
"""
Basic Usage Example - Study Timer

This script demonstrates the basic usage of the study timer with a
shortened tick interval so a full session finishes in a few seconds. It
shows how to:
- Load settings and build a session plan from a configuration
- Attach an observer and follow ticks and phase changes
- Pause, resume and repeat a session

Run: python examples/basic_usage.py
"""

import tempfile
import threading
import time
from pathlib import Path

from study_timer.engine.observer import TimerObserver
from study_timer.logging import configure_logging
from study_timer.service import StudyTimerService
from study_timer.session.models import SessionConfig


class ConsoleObserver(TimerObserver):
    """Prints timer events and signals when the session is done."""

    def __init__(self):
        self.done = threading.Event()

    def on_snapshot(self, snapshot):
        print(f"attached: {snapshot.status.value} {snapshot.formatted_time}")

    def on_tick(self, remaining_seconds, current_phase_index):
        print(f"  phase {current_phase_index + 1}: {remaining_seconds}s left")

    def on_phase_complete(self, phase):
        print(f"✅ {phase.name} complete")

    def on_session_complete(self, plan):
        print(f"🎉 Session '{plan.name}' complete ({plan.phase_count} phases)")
        self.done.set()


def main():
    """Run a short two-cycle session."""
    workdir = Path(tempfile.mkdtemp(prefix="study_timer_"))

    service = StudyTimerService(overrides={
        # 0.2s per countdown second keeps the demo short
        "engine": {"tick_interval_seconds": 0.2},
        "storage": {
            "presets_db_path": str(workdir / "presets.db"),
            "events_db_path": str(workdir / "events.db"),
        },
    })
    configure_logging(**service.config["logging"])

    seeded = service.seed_presets()
    print(f"Seeded {len(seeded)} presets:")
    for preset in service.presets.list_presets():
        print(f"  [{preset.id}] {preset.config.label}: {preset.config.total_seconds}s")

    config = SessionConfig(
        total_seconds=3,
        include_break=True,
        break_seconds=2,
        cycles=2,
        label="Demo Session",
    )
    plan = service.build(config)
    print(f"\n📋 {plan.name}: {plan.description}")
    for phase in plan.phases:
        print(f"  - {phase.name} ({phase.duration_seconds}s)")

    observer = ConsoleObserver()
    service.attach_observer(observer)
    service.start_plan(plan)

    time.sleep(0.5)
    service.pause()
    print(f"⏸  paused at {service.snapshot().formatted_time}")
    service.resume()

    observer.done.wait(timeout=10)
    service.engine.wait_idle(timeout=5)

    observer.done.clear()
    print("\n🔁 Start another")
    service.start_another()
    observer.done.wait(timeout=10)

    if service.event_log is not None:
        print(f"\nCompleted sessions recorded: {service.event_log.count('session_complete')}")
        print(f"Study seconds recorded: {service.event_log.completed_study_seconds()}")

    service.shutdown()


if __name__ == "__main__":
    main()
