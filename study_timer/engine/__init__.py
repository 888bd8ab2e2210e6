"""
Timer engine module.

Owns the single active countdown: the IDLE -> RUNNING <-> PAUSED ->
COMPLETED -> IDLE state machine, the one-second ticker thread, and the
observer registry that reports ticks and phase/session completion.
"""
