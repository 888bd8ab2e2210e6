"""
Session builder: compiles a SessionConfig into a SessionPlan.

Breakless custom timers are single-shot: they produce exactly one study
phase regardless of the configured cycle count. With breaks enabled each
cycle contributes a study phase followed by a break phase. Whether the
final cycle keeps its trailing break is a builder policy (kept by default).
"""

from typing import Optional

from ..config.defaults import BuilderParams
from ..errors import InvalidConfigError
from ..logging.config import get_logger
from ..utils.time import format_duration_label
from .models import Phase, SessionConfig, SessionPlan

logger = get_logger(__name__)

CUSTOM_TECHNIQUE = "Custom Timer"


class SessionBuilder:
    """Pure SessionConfig -> SessionPlan transformation."""

    def __init__(self, params: Optional[BuilderParams] = None):
        self.params = params or BuilderParams()

    @property
    def trailing_break(self) -> bool:
        return self.params.trailing_break

    def validate(self, config: SessionConfig) -> None:
        """
        Reject configurations that cannot produce a runnable plan.

        Raises:
            InvalidConfigError: Zero study duration, zero break duration with
                breaks enabled, or fewer than one cycle with breaks enabled
        """
        if config.total_seconds <= 0:
            raise InvalidConfigError(
                "Study duration must be greater than zero",
                field="total_seconds",
                value=config.total_seconds
            )

        if config.include_break:
            if config.break_seconds <= 0:
                raise InvalidConfigError(
                    "Break duration must be greater than zero when breaks are enabled",
                    field="break_seconds",
                    value=config.break_seconds
                )
            if config.cycles < 1:
                raise InvalidConfigError(
                    "Cycle count must be at least 1",
                    field="cycles",
                    value=config.cycles
                )

    def build(self, config: SessionConfig) -> SessionPlan:
        """
        Build the phase sequence for a configuration.

        Args:
            config: Raw session configuration

        Returns:
            Immutable session plan

        Raises:
            InvalidConfigError: If the configuration is rejected
        """
        try:
            self.validate(config)
        except InvalidConfigError as e:
            logger.warning(
                "Rejected session configuration",
                label=config.label,
                field=e.field,
                value=e.value,
                error=str(e)
            )
            raise

        if not config.include_break:
            phases = [self._study_phase(config.total_seconds)]
            description = f"{format_duration_label(config.total_seconds)} study"
        else:
            phases = []
            for cycle in range(config.cycles):
                phases.append(self._study_phase(config.total_seconds))
                is_last = cycle == config.cycles - 1
                if self.params.trailing_break or not is_last:
                    phases.append(self._break_phase(config.break_seconds))
            description = (
                f"{format_duration_label(config.total_seconds)} study + "
                f"{format_duration_label(config.break_seconds)} break x {config.cycles}"
            )

        plan = SessionPlan(
            name=config.label,
            phases=tuple(phases),
            description=description,
            technique=CUSTOM_TECHNIQUE,
        )

        logger.debug(
            "Built session plan",
            label=plan.name,
            phase_count=plan.phase_count,
            total_seconds=plan.total_seconds,
            trailing_break=self.params.trailing_break
        )

        return plan

    def _study_phase(self, seconds: int) -> Phase:
        return Phase(
            name=self.params.study_phase_name,
            duration_seconds=seconds,
            is_break=False,
            instructions=self.params.study_instructions,
            color=self.params.study_color,
        )

    def _break_phase(self, seconds: int) -> Phase:
        return Phase(
            name=self.params.break_phase_name,
            duration_seconds=seconds,
            is_break=True,
            instructions=self.params.break_instructions,
            color=self.params.break_color,
        )


def build_plan(config: SessionConfig, params: Optional[BuilderParams] = None) -> SessionPlan:
    """Build a plan with a one-off builder."""
    return SessionBuilder(params).build(config)
