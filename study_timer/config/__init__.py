"""
Configuration module.

Frozen-dataclass defaults, YAML settings and preset loading with layered
precedence, and validation of settings and raw session configurations.
"""
