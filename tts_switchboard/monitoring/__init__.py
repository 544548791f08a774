"""
Monitoring for the switchboard.

Components:
    StructuredLogger - Routing events (mode fallbacks, retries, synthesis)
    MetricsCollector - Counters and latency histogram for the router

Example:
    from tts_switchboard.monitoring import MetricsCollector, configure_logging

    configure_logging("warning", json_format=False)
    metrics = MetricsCollector()
"""

from tts_switchboard.monitoring.metrics import (
    MetricsCollector,
    Counter,
    Histogram,
)
from tts_switchboard.monitoring.logging import (
    StructuredLogger,
    LogLevel,
    LogRecord,
    configure_logging,
    get_logger,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "Counter",
    "Histogram",
    # Logging
    "StructuredLogger",
    "LogLevel",
    "LogRecord",
    "configure_logging",
    "get_logger",
]
