"""
Predefined study technique templates.

Hand-authored session plans that bypass the builder. They satisfy the same
study/break alternation invariant as built plans.
"""

from ..errors import TemplateNotFoundError
from .models import Phase, SessionPlan

FOCUS_COLOR = "#EF5350"
DEEP_COLOR = "#6FB8E9"
TIMEBOX_COLOR = "#FFA726"
BREAK_COLOR = "#4CAF50"

_FOCUS = Phase(
    name="Focus Time",
    duration_seconds=25 * 60,
    is_break=False,
    instructions="Focus deeply on your task. Eliminate distractions.",
    color=FOCUS_COLOR,
)

_SHORT_BREAK = Phase(
    name="Short Break",
    duration_seconds=5 * 60,
    is_break=True,
    instructions="Take a break! Stretch, hydrate, and relax.",
    color=BREAK_COLOR,
)

POMODORO_CYCLE = SessionPlan(
    name="Pomodoro Cycle",
    description="Complete focus + break cycle",
    technique="Pomodoro Technique",
    phases=(_FOCUS, _SHORT_BREAK),
)

POMODORO_FOUR_CYCLE = SessionPlan(
    name="Pomodoro Four Cycle",
    description="Four focus + break cycles",
    technique="Pomodoro Technique",
    phases=(_FOCUS, _SHORT_BREAK) * 4,
)

DEEP_WORK_CYCLE = SessionPlan(
    name="Deep Work Cycle",
    description="90-min focus + recharge break",
    technique="90-Minute Focus Cycle",
    phases=(
        Phase(
            name="Deep Focus",
            duration_seconds=90 * 60,
            is_break=False,
            instructions="Enter deep work mode. No interruptions for 90 minutes.",
            color=DEEP_COLOR,
        ),
        Phase(
            name="Recharge Break",
            duration_seconds=25 * 60,
            is_break=True,
            instructions="Take a longer break. Walk, rest, or do light activity.",
            color=BREAK_COLOR,
        ),
    ),
)

TIME_BOX_SESSION = SessionPlan(
    name="Time-Box Session",
    description="Fixed duration focused work",
    technique="Time-Boxing",
    phases=(
        Phase(
            name="Time-Box Work",
            duration_seconds=45 * 60,
            is_break=False,
            instructions="Work within the time limit. Stop when time is up.",
            color=TIMEBOX_COLOR,
        ),
    ),
)

TEMPLATES: dict[str, SessionPlan] = {
    plan.name: plan
    for plan in (POMODORO_CYCLE, POMODORO_FOUR_CYCLE, DEEP_WORK_CYCLE, TIME_BOX_SESSION)
}


def list_templates() -> list[SessionPlan]:
    """All technique templates in display order."""
    return list(TEMPLATES.values())


def get_template(name: str) -> SessionPlan:
    """
    Look up a technique template by name.

    Raises:
        TemplateNotFoundError: If no template has that name
    """
    try:
        return TEMPLATES[name]
    except KeyError:
        raise TemplateNotFoundError(
            f"Unknown session template: {name}",
            template_name=name,
            context={"available": list(TEMPLATES)}
        ) from None
