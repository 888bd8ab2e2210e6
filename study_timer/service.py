"""
Study timer service coordinator.

Wires configuration, the session builder, technique templates, saved
presets and the timer engine together for a caller such as a UI layer.
Repeating a finished session ("Start Another") lives here: to the engine it
is an ordinary start from IDLE.
"""

from pathlib import Path
from typing import Any, Optional

import structlog

from .config.defaults import BuilderParams, EngineParams, StorageParams
from .config.loader import ConfigLoader
from .engine.models import EngineSnapshot
from .engine.observer import TimerObserver
from .engine.timer_engine import TimerEngine
from .errors import InvalidConfigError, InvalidStateError, PresetNotFoundError
from .persistence.event_log import SessionEventLog
from .persistence.preset_store import PresetStore
from .session.builder import SessionBuilder
from .session.models import SessionConfig, SessionPlan
from .session.templates import get_template, list_templates
from .utils.time import Clock, monotonic_clock

logger = structlog.get_logger(__name__)


class StudyTimerService:
    """
    Main coordinator for study sessions.

    Manages the session pipeline:
    Preset/Config → SessionBuilder → SessionPlan → TimerEngine → Observers
    """

    def __init__(
        self,
        config_dir: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None,
        clock: Clock = monotonic_clock,
        threaded: bool = True,
        record_events: bool = True,
    ) -> None:
        """Initialize the service from layered configuration."""
        self.logger = logger

        self.config_loader = ConfigLoader.create(config_dir)
        self.config = self.config_loader.merge_config(overrides)

        self.builder = SessionBuilder(BuilderParams(**self.config["builder"]))
        self.engine = TimerEngine(
            params=EngineParams(**self.config["engine"]),
            clock=clock,
            threaded=threaded,
        )

        storage = StorageParams(**self.config["storage"])
        self.presets = PresetStore(storage.presets_db_path)

        self.event_log: Optional[SessionEventLog] = None
        if record_events:
            self.event_log = SessionEventLog(storage.events_db_path)
            self.engine.attach_observer(self.event_log)

        self._last_plan: Optional[SessionPlan] = None

        self.logger.info(
            "Study timer service initialized",
            trailing_break=self.builder.trailing_break,
            tick_interval_seconds=self.engine.params.tick_interval_seconds,
            record_events=record_events
        )

    # ----- Planning -----

    def build(self, config: SessionConfig) -> SessionPlan:
        """Compile a configuration into a plan (raises InvalidConfigError)."""
        return self.builder.build(config)

    def templates(self) -> list[SessionPlan]:
        return list_templates()

    def seed_presets(self) -> list[int]:
        """Store the bundled YAML presets if no presets have been saved yet."""
        return self.presets.seed(self.config_loader.load_presets())

    # ----- Starting sessions -----

    def start_plan(self, plan: SessionPlan) -> SessionPlan:
        self.engine.start(plan)
        self._last_plan = plan
        return plan

    def start_config(self, config: SessionConfig) -> SessionPlan:
        """Build and start a session from a raw configuration."""
        try:
            plan = self.build(config)
        except InvalidConfigError as e:
            self.logger.warning(
                "Session not started: invalid configuration",
                label=config.label,
                field=e.field,
                error=str(e)
            )
            raise
        return self.start_plan(plan)

    def start_preset(self, preset_id: int) -> SessionPlan:
        """
        Start a saved preset.

        Raises:
            PresetNotFoundError: If the preset does not exist
        """
        preset = self.presets.get_preset(preset_id)
        if preset is None:
            raise PresetNotFoundError(
                f"Preset {preset_id} not found",
                preset_id=preset_id
            )
        return self.start_config(preset.config)

    def start_template(self, name: str) -> SessionPlan:
        """Start a technique template by name (raises TemplateNotFoundError)."""
        return self.start_plan(get_template(name))

    def start_another(self) -> SessionPlan:
        """
        Start the most recently started plan again.

        Raises:
            InvalidStateError: If no plan has been started yet, or the
                engine is not IDLE
        """
        if self._last_plan is None:
            raise InvalidStateError(
                "No previous session to repeat",
                current_state=self.engine.status.value,
                attempted_transition="start_another"
            )
        return self.start_plan(self._last_plan)

    # ----- Controls -----

    def pause(self) -> None:
        self.engine.pause()

    def resume(self) -> None:
        self.engine.resume()

    def cancel(self) -> None:
        self.engine.cancel()

    def snapshot(self) -> EngineSnapshot:
        return self.engine.snapshot()

    def attach_observer(self, observer: TimerObserver) -> None:
        self.engine.attach_observer(observer)

    def detach_observer(self, observer: TimerObserver) -> bool:
        return self.engine.detach_observer(observer)

    def shutdown(self) -> None:
        """Cancel any running session and stop background threads."""
        self.engine.shutdown()
        self.logger.info("Study timer service shut down")
