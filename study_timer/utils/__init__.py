"""
Utility functions module.

Presentation helpers over integer seconds (formatted countdown, duration
labels, progress) and the monotonic clock used for elapsed-time accounting.
"""
