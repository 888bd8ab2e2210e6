"""Default configuration parameters for the study timer."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineParams:
    """Timer engine scheduling parameters."""
    tick_interval_seconds: float = 1.0               # Nominal ticker cadence
    # Dispatcher thread for caller-driven engines; ticker-driven engines always use it
    async_notifications: bool = False


@dataclass(frozen=True)
class BuilderParams:
    """Session builder parameters."""
    # Phase count policy: 2 x cycles (True) or 2 x cycles - 1 (False)
    trailing_break: bool = True

    # Labels for built phases
    study_phase_name: str = "Study Time"
    break_phase_name: str = "Break Time"
    study_instructions: str = "Focus on your task for the set duration."
    break_instructions: str = "Take a break and recharge."

    # Presentation hints
    study_color: str = "#6FB8E9"
    break_color: str = "#4CAF50"


@dataclass(frozen=True)
class StorageParams:
    """SQLite storage locations."""
    presets_db_path: str = "presets.db"
    events_db_path: str = "session_events.db"


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    engine: EngineParams
    builder: BuilderParams
    storage: StorageParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        engine=EngineParams(),
        builder=BuilderParams(),
        storage=StorageParams(),
        logging=LoggingParams(),
    )
