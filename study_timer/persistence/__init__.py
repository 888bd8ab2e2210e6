"""
Persistence module.

SQLite-backed saved timer presets and the append-only session event log.
"""
