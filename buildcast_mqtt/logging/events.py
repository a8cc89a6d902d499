"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

This module defines typed event names for structured logging.

Design:
- Enum-based (prevents typos, enables autocomplete)
- Hierarchical naming (area.action)
- Searchable in log aggregators

Event Naming Convention:
    <area>.<category>.<action>

    area: notify, variables, credentials, mqtt, error

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, message, metadata.topic
    | filter event = "notify.failed"
    | stats count() by metadata.job
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - notify.*: One notification invocation
    - variables.*: Template expansion
    - credentials.*: Credential lookup
    - mqtt.*: MQTT broker interactions
    - error.*: Error conditions
    """

    # ========== Notification Events ==========
    NOTIFY_STARTED = "notify.started"
    """Notification invocation started for a build."""

    NOTIFY_COMPLETED = "notify.completed"
    """Message delivered; invocation finished."""

    NOTIFY_FAILED = "notify.failed"
    """Invocation finished without delivering (caller continues)."""

    # ========== Variable Events ==========
    VARIABLES_RESOLVED = "variables.resolved"
    """Topic and message templates expanded."""

    # ========== Credential Events ==========
    CREDENTIALS_RESOLVED = "credentials.resolved"
    """Credentials found for the configured id."""

    CREDENTIALS_NOT_FOUND = "credentials.not_found"
    """No credentials for the configured id; connecting anonymously."""

    # ========== MQTT Events ==========
    MQTT_CONNECTED = "mqtt.connected"
    """MQTT broker connection established."""

    MQTT_DISCONNECTED = "mqtt.disconnected"
    """MQTT broker connection closed."""

    MQTT_PUBLISH_SUCCESS = "mqtt.publish.success"
    """Message successfully published to broker."""

    MQTT_PUBLISH_FAILED = "mqtt.publish.failed"
    """Message publication failed."""

    # ========== Error Events ==========
    MQTT_CONNECTION_ERROR = "error.mqtt_connection"
    """Failed to connect to MQTT broker."""

    MQTT_PUBLISH_ERROR = "error.mqtt_publish"
    """Error during message publication."""

