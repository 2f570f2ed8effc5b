"""Observability Package."""

from .logging_config import (
    bind_context,
    clear_context,
    configure_logging,
)
from .metrics import (
    record_decision,
    record_execution,
    record_feed_error,
    record_feed_update,
)
from .metrics_server import start_metrics_server, stop_metrics_server

__all__ = [
    # Logging
    "configure_logging",
    "bind_context",
    "clear_context",
    # Metrics
    "record_feed_update",
    "record_feed_error",
    "record_decision",
    "record_execution",
    # Server
    "start_metrics_server",
    "stop_metrics_server",
]
