"""
Study Timer - Study Session Timer Engine

Turns a study configuration (duration, optional break, repeat count) into an
ordered plan of timed phases, drives a one-second countdown through those
phases, and notifies observers of phase and session completion.
"""

__version__ = "0.1.0"
__author__ = "Study Timer Team"
