"""Configuration validation utilities."""

from dataclasses import dataclass, fields
from typing import Any

from .defaults import BuilderParams, EngineParams, LoggingParams, StorageParams


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

SECTIONS = {
    "engine": EngineParams,
    "builder": BuilderParams,
    "storage": StorageParams,
    "logging": LoggingParams,
}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ConfigValidator:
    """Validates settings and raw session configurations."""

    @staticmethod
    def validate_session_config(params: Any) -> list[ValidationError]:
        """
        Validate a raw session configuration mapping.

        Accepts either ``total_seconds`` or the ``hours``/``minutes``/``seconds``
        picker components.
        """
        if not isinstance(params, dict):
            return [ValidationError(
                field="preset",
                message="Must be a mapping",
                value=params
            )]

        errors = []

        components = {}
        for name in ("hours", "minutes", "seconds"):
            if name in params:
                value = params[name]
                if not _is_int(value) or value < 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-negative integer",
                        value=value
                    ))
                else:
                    components[name] = value

        if "total_seconds" in params:
            total = params["total_seconds"]
            if not _is_int(total):
                errors.append(ValidationError(
                    field="total_seconds",
                    message="Must be an integer",
                    value=total
                ))
                total = None
        else:
            total = (components.get("hours", 0) * 3600
                     + components.get("minutes", 0) * 60
                     + components.get("seconds", 0))

        if total is not None and total <= 0:
            errors.append(ValidationError(
                field="total_seconds",
                message="Study duration must be greater than zero",
                value=total
            ))

        include_break = params.get("include_break", False)
        if not isinstance(include_break, bool):
            errors.append(ValidationError(
                field="include_break",
                message="Must be a boolean",
                value=include_break
            ))
            include_break = False

        if include_break:
            value = params.get("break_seconds", 0)
            if not _is_int(value) or value <= 0:
                errors.append(ValidationError(
                    field="break_seconds",
                    message="Must be a positive integer when breaks are enabled",
                    value=value
                ))

        if "cycles" in params:
            value = params["cycles"]
            if not _is_int(value) or value < 1:
                errors.append(ValidationError(
                    field="cycles",
                    message="Must be an integer of at least 1",
                    value=value
                ))

        if "label" in params and not isinstance(params["label"], str):
            errors.append(ValidationError(
                field="label",
                message="Must be a string",
                value=params["label"]
            ))

        return errors

    @staticmethod
    def validate_engine_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate engine parameters."""
        errors = []

        if "tick_interval_seconds" in params:
            value = params["tick_interval_seconds"]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                errors.append(ValidationError(
                    field="tick_interval_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "async_notifications" in params:
            value = params["async_notifications"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="async_notifications",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_builder_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate session builder parameters."""
        errors = []

        if "trailing_break" in params:
            value = params["trailing_break"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="trailing_break",
                    message="Must be a boolean",
                    value=value
                ))

        for name in ("study_phase_name", "break_phase_name"):
            if name in params:
                value = params[name]
                if not isinstance(value, str) or not value.strip():
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-empty string",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in LOG_LEVELS:
                errors.append(ValidationError(
                    field="level",
                    message=f"Must be one of {', '.join(LOG_LEVELS)}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        for section, value in config.items():
            if section not in SECTIONS:
                errors.append(ValidationError(
                    field=section,
                    message="Unknown settings section",
                    value=value
                ))
                continue
            if not isinstance(value, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=value
                ))
                continue
            known = {f.name for f in fields(SECTIONS[section])}
            for key in value:
                if key not in known:
                    errors.append(ValidationError(
                        field=f"{section}.{key}",
                        message="Unknown setting",
                        value=value[key]
                    ))

        if errors:
            return errors

        if "engine" in config:
            errors.extend(ConfigValidator.validate_engine_params(config["engine"]))

        if "builder" in config:
            errors.extend(ConfigValidator.validate_builder_params(config["builder"]))

        if "logging" in config:
            errors.extend(ConfigValidator.validate_logging_params(config["logging"]))

        return errors
