"""
Structured JSON Logger
=====================

Bounded Context: Observability Infrastructure

This module provides the structured logger used as the log sink of a
notification invocation.

Design:
- JSON output (compatible with log aggregators)
- Thread-safe (uses standard logging module)
- Contextual metadata (job, build number, topic, etc.)
- Type-safe events (LogEvent enum)
- Error entries embed the formatted traceback

Example:
    >>> logger = StructuredLogger(component="notifier")
    >>> logger.info(
    ...     event=LogEvent.MQTT_PUBLISH_SUCCESS,
    ...     message="Published message",
    ...     metadata={'topic': 'jenkins/job/demo/', 'qos': 1}
    ... )

Output:
    {
        "timestamp": "2026-10-19T15:30:45.123456+00:00",
        "level": "INFO",
        "component": "notifier",
        "event": "mqtt.publish.success",
        "message": "Published message",
        "metadata": {"topic": "jenkins/job/demo/", "qos": 1}
    }
"""

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from .events import LogEvent


class StructuredLogger:
    """
    JSON structured logger for notification invocations.

    Wraps Python's logging module with structured metadata support.

    Attributes:
        component: Component name (e.g., "notifier", "cli")
        logger: Underlying Python logger instance

    Thread Safety:
        Thread-safe via Python's logging module.
    """

    def __init__(
        self,
        component: str,
        level: int = logging.INFO,
        logger_name: Optional[str] = None
    ):
        """
        Initialize structured logger.

        Args:
            component: Component identifier (e.g., "notifier")
            level: Logging level (default: INFO)
            logger_name: Custom logger name (default: buildcast_mqtt.<component>)
        """
        self.component = component
        self.logger_name = logger_name or f"buildcast_mqtt.{component}"
        self.logger = logging.getLogger(self.logger_name)
        self.logger.setLevel(level)

        # Configure JSON formatter if not already configured
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def _log(
        self,
        level: str,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Internal log method with structured format.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR)
            event: Typed log event
            message: Human-readable message
            metadata: Additional context (job, topic, etc.)
            exc_info: Exception for ERROR logs
        """
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': level,
            'component': self.component,
            'event': event.value,
            'message': message,
        }

        if metadata:
            log_entry['metadata'] = metadata

        if exc_info:
            log_entry['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info),
                'traceback': ''.join(
                    traceback.format_exception(
                        type(exc_info), exc_info, exc_info.__traceback__
                    )
                ),
            }

        log_level = getattr(logging, level)
        self.logger.log(log_level, json.dumps(log_entry, default=str))

    def debug(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log DEBUG level message."""
        self._log('DEBUG', event, message, metadata)

    def info(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log INFO level message.

        Args:
            event: Typed log event
            message: Human-readable message
            metadata: Additional context

        Example:
            >>> logger.info(
            ...     event=LogEvent.MQTT_CONNECTED,
            ...     message="Connected to MQTT broker",
            ...     metadata={'broker': 'localhost:1883'}
            ... )
        """
        self._log('INFO', event, message, metadata)

    def warning(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log WARNING level message.

        Args:
            event: Typed log event
            message: Human-readable message
            metadata: Additional context
        """
        self._log('WARNING', event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log ERROR level message.

        Args:
            event: Typed log event
            message: Human-readable message
            metadata: Additional context
            exc_info: Exception instance; its traceback is embedded in the entry

        Example:
            >>> try:
            ...     client.connect(host, port)
            ... except OSError as e:
            ...     logger.error(
            ...         event=LogEvent.MQTT_CONNECTION_ERROR,
            ...         message="Failed to connect to broker",
            ...         exc_info=e,
            ...         metadata={'broker': 'localhost:1883'}
            ...     )
        """
        self._log('ERROR', event, message, metadata, exc_info)


class JSONFormatter(logging.Formatter):
    """
    Formatter that passes the pre-serialized JSON entry through.

    This formatter is used internally by StructuredLogger.
    """

    def format(self, record: logging.LogRecord) -> str:
        # The message from StructuredLogger is already JSON
        return record.getMessage()


def create_logger(
    component: str,
    level: int = logging.INFO
) -> StructuredLogger:
    """
    Factory function to create configured StructuredLogger.

    Args:
        component: Component identifier
        level: Logging level (default: INFO)

    Returns:
        Configured StructuredLogger instance

    Example:
        >>> logger = create_logger("notifier", level=logging.DEBUG)
    """
    return StructuredLogger(component=component, level=level)
