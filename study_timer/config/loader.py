"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import InvalidConfigError
from ..logging.config import get_logger
from ..session.models import SessionConfig
from .defaults import DefaultConfig, get_default_config
from .validation import ConfigValidator

logger = get_logger(__name__)

SETTINGS_FILE = "settings.yaml"
PRESETS_FILE = "presets.yaml"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def _read_yaml(self, filename: str) -> Any:
        path = self.config_dir / filename

        if not path.exists():
            return {}

        with open(path) as f:
            data = yaml.safe_load(f)

        return data or {}

    def load_settings(self) -> Any:
        """Load settings overrides from the config directory."""
        return self._read_yaml(SETTINGS_FILE)

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. settings.yaml in the config directory
        3. Global defaults (lowest priority)

        Raises:
            InvalidConfigError: If the merged settings fail validation
        """
        settings = self.load_settings()
        if not isinstance(settings, dict):
            raise InvalidConfigError(
                f"{SETTINGS_FILE} must contain a mapping of settings sections",
                field=SETTINGS_FILE,
                value=type(settings).__name__
            )

        config = self._dataclass_to_dict(self.defaults)
        config = self._deep_merge(config, settings)

        if overrides:
            config = self._deep_merge(config, overrides)

        errors = ConfigValidator.validate_config(config)
        if errors:
            first = errors[0]
            logger.error(
                "Settings validation failed",
                errors=[f"{err.field}: {err.message} (got: {err.value})" for err in errors]
            )
            raise InvalidConfigError(
                f"Invalid setting {first.field}: {first.message}",
                field=first.field,
                value=first.value,
                context={"error_count": len(errors)}
            )

        return config

    def load_presets(self) -> list[SessionConfig]:
        """
        Load bundled timer presets from presets.yaml.

        Entries that fail validation are skipped and logged.
        """
        raw = self._read_yaml(PRESETS_FILE)
        presets = []

        entries = raw.get("presets") if isinstance(raw, dict) else None
        if not isinstance(entries, list):
            if raw:
                logger.warning(
                    "Ignoring malformed presets file",
                    path=str(self.config_dir / PRESETS_FILE),
                    expected="mapping with a 'presets' list"
                )
            return presets

        for entry in entries:
            errors = ConfigValidator.validate_session_config(entry)
            if errors:
                logger.warning(
                    "Skipping invalid preset",
                    label=entry.get("label") if isinstance(entry, dict) else None,
                    errors=[f"{err.field}: {err.message}" for err in errors]
                )
                continue
            presets.append(SessionConfig.from_dict(entry))

        logger.debug("Loaded presets", count=len(presets), path=str(self.config_dir / PRESETS_FILE))
        return presets

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
