"""
Session planning module.

Builds immutable session plans from user configuration and provides the
hand-authored study technique templates. Plans alternate study and break
phases, starting with study.
"""
