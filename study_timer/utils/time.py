"""
Time formatting and progress utilities.

Pure, stateless helpers over integer seconds used for presentation. None of
them affect engine correctness.
"""

import time
from typing import Callable


Clock = Callable[[], float]


def monotonic_clock() -> float:
    """Default clock for elapsed-time measurement."""
    return time.monotonic()


def split_seconds(total_seconds: int) -> tuple[int, int, int]:
    """Split seconds into (hours, minutes, seconds), clamping negatives to zero."""
    total_seconds = max(0, int(total_seconds))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return hours, minutes, seconds


def format_time(total_seconds: int) -> str:
    """
    Format a countdown value as HH:MM:SS, or MM:SS when under an hour.

    Args:
        total_seconds: Remaining seconds

    Returns:
        Zero-padded time string, never negative
    """
    hours, minutes, seconds = split_seconds(total_seconds)

    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def format_duration_label(total_seconds: int) -> str:
    """Human label for a configured duration, e.g. '1h 30m 0s', '25m 0s', '45s'."""
    hours, minutes, seconds = split_seconds(total_seconds)

    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    elif minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def calculate_progress(remaining_seconds: int, duration_seconds: int) -> float:
    """
    Fraction of a phase already elapsed, from 0.0 to 1.0.

    Args:
        remaining_seconds: Seconds left in the phase
        duration_seconds: Full phase duration

    Returns:
        Progress clamped to [0.0, 1.0]; 0.0 for a non-positive duration
    """
    if duration_seconds <= 0:
        return 0.0

    progress = 1.0 - (remaining_seconds / duration_seconds)
    return min(1.0, max(0.0, progress))
