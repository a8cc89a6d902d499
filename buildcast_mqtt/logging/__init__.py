"""
Structured Logging for buildcast
================================

Bounded Context: Observability

JSON-structured logging used as the per-invocation log sink.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function

Example:
    >>> from buildcast_mqtt.logging import create_logger, LogEvent
    >>> logger = create_logger("notifier")
    >>> logger.warning(
    ...     event=LogEvent.CREDENTIALS_NOT_FOUND,
    ...     message="No credentials found; connecting anonymously",
    ...     metadata={'credentials_id': 'mqtt-deploy'}
    ... )

Output:
    {
        "timestamp": "2026-10-19T15:30:45.123456+00:00",
        "level": "WARNING",
        "component": "notifier",
        "event": "credentials.not_found",
        "message": "No credentials found; connecting anonymously",
        "metadata": {"credentials_id": "mqtt-deploy"}
    }
"""

from .events import LogEvent
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
