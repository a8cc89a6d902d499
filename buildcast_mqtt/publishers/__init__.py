"""
MQTT Publishers
==============

Bounded Context: Message Production

Publishers for sending build notifications to an MQTT broker.

Public API
----------
    BasePublisher: Abstract one-shot publisher (connection lifecycle)
    BuildResultPublisher: Build notification publisher
    create_client: Default paho client factory
"""

from .base import BasePublisher, create_client
from .build_result import BuildResultPublisher

__all__ = [
    'BasePublisher',
    'BuildResultPublisher',
    'create_client',
]
