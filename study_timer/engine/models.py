"""
Timer engine data models.

Status enumeration and the immutable snapshot handed to callers and
observers. The mutable runtime state itself never leaves the engine.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..session.models import Phase, SessionPlan
from ..utils.time import calculate_progress, format_time


class TimerStatus(str, Enum):
    """Engine lifecycle states."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class EngineSnapshot:
    """Read-only view of the engine state at one instant."""

    status: TimerStatus
    current_phase_index: int = 0
    remaining_seconds: int = 0
    active_plan: Optional[SessionPlan] = None
    sessions_completed: int = 0

    @property
    def is_active(self) -> bool:
        return self.status in (TimerStatus.RUNNING, TimerStatus.PAUSED)

    @property
    def current_phase(self) -> Optional[Phase]:
        if self.active_plan is None:
            return None
        if 0 <= self.current_phase_index < self.active_plan.phase_count:
            return self.active_plan.phases[self.current_phase_index]
        return None

    @property
    def next_phase(self) -> Optional[Phase]:
        if self.active_plan is None:
            return None
        index = self.current_phase_index + 1
        if index < self.active_plan.phase_count:
            return self.active_plan.phases[index]
        return None

    @property
    def formatted_time(self) -> str:
        return format_time(self.remaining_seconds)

    @property
    def progress(self) -> float:
        phase = self.current_phase
        if phase is None:
            return 0.0
        return calculate_progress(self.remaining_seconds, phase.duration_seconds)

    def to_dict(self) -> dict[str, Any]:
        phase = self.current_phase
        return {
            "status": self.status.value,
            "current_phase_index": self.current_phase_index,
            "remaining_seconds": self.remaining_seconds,
            "formatted_time": self.formatted_time,
            "plan_name": self.active_plan.name if self.active_plan else None,
            "phase_name": phase.name if phase else None,
            "is_break": phase.is_break if phase else None,
            "phase_count": self.active_plan.phase_count if self.active_plan else 0,
            "sessions_completed": self.sessions_completed,
        }
