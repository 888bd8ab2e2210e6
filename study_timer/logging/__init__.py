"""
Logging configuration and utilities for the study timer.
"""
from .config import configure_logging, get_logger, get_state_logger, log_state_transition

__all__ = ["configure_logging", "get_logger", "get_state_logger", "log_state_transition"]
