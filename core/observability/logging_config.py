"""
Structured Logging Configuration for the depth seller.

Module loggers stay plain `logging.getLogger(__name__)`; their records are
rendered by the same structlog processor chain as structlog loggers, so every
line (feeds, decisions, executions) carries an ISO timestamp, the level, the
logger name and any context bound with bind_context().

- console: coloured key/value lines for development
- json: one JSON object per line for production
"""

import logging
import sys
from typing import List, Optional

import structlog


def _shared_processors() -> List:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def _build_formatter(log_format: str) -> structlog.stdlib.ProcessorFormatter:
    if log_format == "json":
        renderers = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    )


def configure_logging(log_level: str = "INFO", log_format: str = "console", log_file: Optional[str] = "seller.log"):
    """
    Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Output format ('json' for production, 'console' for development)
        log_file: Optional path of a log file written alongside stdout (appended)
    """
    formatter = _build_formatter(log_format)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a"))
    for handler in handlers:
        handler.setFormatter(formatter)

    level = logging.getLevelName(str(log_level).strip().upper())
    unknown_level = not isinstance(level, int)
    if unknown_level:
        level = logging.INFO

    # Replaces any handlers installed before (e.g. by an earlier call)
    logging.basicConfig(handlers=handlers, level=level, force=True)

    structlog.configure(
        processors=_shared_processors() + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if unknown_level:
        logging.getLogger(__name__).warning(f"⚠️ Unknown log level {log_level!r}, falling back to INFO")


def bind_context(**kwargs):
    """
    Bind context variables to every subsequent log line of this task.

    Example:
        bind_context(reference="SOL/USDT", executable="SOL/USD", mode="paper")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context():
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()
