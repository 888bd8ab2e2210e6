"""
Centralized logging configuration for the study timer.

Every component logs through structlog loggers obtained here: engine state
transitions are written to an audit-style state logger, while observer
failures, storage errors and config problems go through plain named loggers.
Output is routed through the stdlib root handler so embedding hosts can
redirect or capture it.
"""
import logging
import sys
from typing import IO, Any, Optional

import structlog
from structlog.types import FilteringBoundLogger, Processor


def _build_processors(include_timestamp: bool, include_caller: bool) -> list[Processor]:
    """Processor chain shared by console and JSON output."""
    chain: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        chain.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

    if include_caller:
        chain.append(structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ))

    return chain


def _renderer(format_json: bool, stream: IO[str]) -> Processor:
    if format_json:
        return structlog.processors.JSONRenderer(sort_keys=True)

    # Colour codes only make sense on a terminal
    colors = hasattr(stream, "isatty") and stream.isatty()
    return structlog.dev.ConsoleRenderer(colors=colors)


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list[Processor]] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """
    Configure structlog and the stdlib root handler.

    Safe to call more than once: the root handler is replaced, so a later
    call (for example after settings.yaml is loaded) takes effect.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: Render one JSON object per line instead of console text
        include_timestamp: Add a UTC ISO-8601 ``timestamp`` key
        include_caller: Add module, function and line number of the call site
        extra_processors: Processors inserted just before rendering
        stream: Output stream, stdout by default
    """
    stream = stream or sys.stdout

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=stream,
        format="%(message)s",
        force=True,
    )

    processors = _build_processors(include_timestamp, include_caller)
    processors.extend(extra_processors or [])
    processors.append(_renderer(format_json, stream))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Named structlog logger (typically ``__name__``)."""
    return structlog.get_logger(name)


def get_state_logger(name: str) -> FilteringBoundLogger:
    """
    Logger for timer engine state transitions.

    Entries carry ``subsystem="timer_engine"`` and ``audit_trail=True`` so
    transition records can be filtered out of the general log stream.
    """
    return get_logger(name).bind(subsystem="timer_engine", audit_trail=True)


def log_state_transition(
    logger: FilteringBoundLogger,
    plan_name: Optional[str],
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Write the standard "State transition" record.

    Args:
        logger: Usually the engine's state logger
        plan_name: Name of the session plan involved, if any
        from_state: Status before the transition
        to_state: Status after the transition
        trigger: What caused it (start, pause, resume, cancel, tick, ...)
        context: Extra fields such as remaining seconds or phase index
    """
    bound_logger = logger.bind(
        plan_name=plan_name,
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("State transition")
