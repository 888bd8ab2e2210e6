"""
System failure error classifications.

Rejected engine transitions, storage failures and observer failures. None
of these end the process; the worst case is a rejected transition.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for engine and infrastructure failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class InvalidStateError(SystemFailureError):
    """Transition requested from a state that does not permit it."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition


class PersistenceError(SystemFailureError):
    """Database or file system persistence failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class ObserverNotificationError(SystemFailureError):
    """An observer callback raised while being notified."""

    def __init__(self, message: str, observer: Optional[str] = None,
                 event_name: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.observer = observer
        self.event_name = event_name
