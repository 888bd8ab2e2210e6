"""
Configuration error classifications.

These exceptions are raised synchronously while building or looking up a
session, before anything reaches the timer engine. They are recoverable:
the caller fixes the input and tries again.
"""

from typing import Any, Optional, Dict


class TimerConfigError(Exception):
    """Base class for rejected timer configuration."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class InvalidConfigError(TimerConfigError):
    """Session configuration, phase or plan that violates its invariants."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


class TemplateNotFoundError(TimerConfigError):
    """Requested technique template does not exist."""

    def __init__(self, message: str, template_name: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.template_name = template_name


class PresetNotFoundError(TimerConfigError):
    """Requested saved preset does not exist in the preset store."""

    def __init__(self, message: str, preset_id: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.preset_id = preset_id
