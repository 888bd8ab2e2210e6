"""
Session data models.

This module defines the immutable building blocks of a study session: the
raw user configuration, the individual timed phases, and the ordered plan
the timer engine executes.
"""

from dataclasses import dataclass
from typing import Any, Optional

from ..errors import InvalidConfigError


@dataclass(frozen=True)
class SessionConfig:
    """User-specified timer parameters before being compiled into a plan."""

    total_seconds: int                               # Study duration per cycle
    include_break: bool = False
    break_seconds: int = 5 * 60                      # Only meaningful with include_break
    cycles: int = 1                                  # Study (+break) repetitions
    label: str = "Custom Session"

    @classmethod
    def from_components(
        cls,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
        **kwargs: Any
    ) -> "SessionConfig":
        """Create a config from hour/minute/second picker values."""
        return cls(total_seconds=hours * 3600 + minutes * 60 + seconds, **kwargs)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionConfig":
        """Create a config from a mapping (YAML preset or stored row)."""
        kwargs = {
            key: data[key]
            for key in ("include_break", "break_seconds", "cycles", "label")
            if key in data
        }

        if "total_seconds" in data:
            return cls(total_seconds=data["total_seconds"], **kwargs)

        return cls.from_components(
            hours=data.get("hours", 0),
            minutes=data.get("minutes", 0),
            seconds=data.get("seconds", 0),
            **kwargs
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_seconds": self.total_seconds,
            "include_break": self.include_break,
            "break_seconds": self.break_seconds,
            "cycles": self.cycles,
            "label": self.label,
        }


@dataclass(frozen=True)
class Phase:
    """One timed segment of a session (study or break)."""

    name: str
    duration_seconds: int
    is_break: bool = False
    instructions: str = ""
    color: Optional[str] = None                      # Presentation hint only

    def __post_init__(self) -> None:
        if (not isinstance(self.duration_seconds, int)
                or isinstance(self.duration_seconds, bool)
                or self.duration_seconds <= 0):
            raise InvalidConfigError(
                f"Phase '{self.name}' must have a positive duration",
                field="duration_seconds",
                value=self.duration_seconds
            )


@dataclass(frozen=True)
class SessionPlan:
    """
    Ordered, immutable sequence of phases.

    Plans with more than one phase strictly alternate study/break, starting
    with a study phase.
    """

    name: str
    phases: tuple[Phase, ...]
    description: str = ""
    technique: str = "Custom Timer"

    def __post_init__(self) -> None:
        # Accept any sequence but always store a tuple
        object.__setattr__(self, "phases", tuple(self.phases))

        if not self.phases:
            raise InvalidConfigError(
                f"Session plan '{self.name}' has no phases",
                field="phases",
                value=0
            )

        if len(self.phases) > 1:
            for index, phase in enumerate(self.phases):
                expected_break = index % 2 == 1
                if phase.is_break != expected_break:
                    raise InvalidConfigError(
                        f"Session plan '{self.name}' must alternate study and break "
                        f"phases starting with study (phase {index} '{phase.name}')",
                        field="phases",
                        value=index
                    )

    @property
    def phase_count(self) -> int:
        return len(self.phases)

    @property
    def total_seconds(self) -> int:
        return sum(phase.duration_seconds for phase in self.phases)

    @property
    def study_seconds(self) -> int:
        return sum(p.duration_seconds for p in self.phases if not p.is_break)

    @property
    def break_seconds(self) -> int:
        return sum(p.duration_seconds for p in self.phases if p.is_break)
