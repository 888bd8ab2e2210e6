"""
Error classification for the study timer.

This module provides a structured exception hierarchy for configuration
problems (rejected before a session starts), rejected engine transitions,
and storage or notification failures.
"""

from .configuration import (
    TimerConfigError,
    InvalidConfigError,
    TemplateNotFoundError,
    PresetNotFoundError,
)
from .system_failures import (
    SystemFailureError,
    InvalidStateError,
    PersistenceError,
    ObserverNotificationError,
)

__all__ = [
    # Configuration Errors
    "TimerConfigError",
    "InvalidConfigError",
    "TemplateNotFoundError",
    "PresetNotFoundError",
    # System Failures
    "SystemFailureError",
    "InvalidStateError",
    "PersistenceError",
    "ObserverNotificationError",
]
