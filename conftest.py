"""
Shared test fixtures: a fake paho client so the publish pipeline can be
exercised without a real MQTT broker.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import pytest

from buildcast_mqtt import create_logger


class FakeMessageInfo:
    """Stand-in for paho's MQTTMessageInfo."""

    def __init__(self, rc: int = 0, published: bool = True):
        self.rc = rc
        self.published = published
        self.wait_timeout: Optional[float] = None

    def wait_for_publish(self, timeout: Optional[float] = None) -> None:
        self.wait_timeout = timeout

    def is_published(self) -> bool:
        return self.published


class FakeClient:
    """
    Minimal paho client double.

    connack_rc=None simulates a broker that never answers CONNECT.
    """

    def __init__(
        self,
        client_id: str,
        transport: str,
        connect_error: Optional[BaseException] = None,
        connack_rc: Optional[int] = 0,
        publish_rc: int = 0,
        published: bool = True,
        publish_error: Optional[BaseException] = None,
        disconnect_error: Optional[BaseException] = None,
    ):
        self.client_id = client_id
        self.transport = transport
        self.connect_error = connect_error
        self.connack_rc = connack_rc
        self.publish_rc = publish_rc
        self.published = published
        self.publish_error = publish_error
        self.disconnect_error = disconnect_error

        self.calls: List[str] = []
        self.username: Optional[str] = None
        self.password: Optional[str] = None
        self.tls = False
        self.connected_to: Optional[tuple] = None
        self.messages: List[Dict[str, Any]] = []
        self.on_connect = None
        self.on_disconnect = None

    def username_pw_set(self, username: str, password: str) -> None:
        self.calls.append('username_pw_set')
        self.username = username
        self.password = password

    def tls_set(self) -> None:
        self.tls = True

    def connect(self, host: str, port: int, keepalive: int = 60) -> None:
        self.calls.append('connect')
        if self.connect_error is not None:
            raise self.connect_error
        self.connected_to = (host, port, keepalive)

    def loop_start(self) -> None:
        self.calls.append('loop_start')
        if self.connack_rc is not None:
            self.on_connect(self, None, {}, self.connack_rc, None)

    def publish(self, topic: str, payload: bytes = None, qos: int = 0, retain: bool = False):
        self.calls.append('publish')
        if self.publish_error is not None:
            raise self.publish_error
        self.messages.append(
            {'topic': topic, 'payload': payload, 'qos': qos, 'retain': retain}
        )
        return FakeMessageInfo(rc=self.publish_rc, published=self.published)

    def disconnect(self) -> None:
        self.calls.append('disconnect')
        if self.disconnect_error is not None:
            raise self.disconnect_error
        if self.on_disconnect is not None:
            self.on_disconnect(self, None, {}, 0, None)

    def loop_stop(self) -> None:
        self.calls.append('loop_stop')


class FakeClientFactory:
    """Client factory recording every client it creates."""

    def __init__(self, **client_options: Any):
        self.client_options = client_options
        self.clients: List[FakeClient] = []

    def __call__(self, client_id: str, transport: str) -> FakeClient:
        client = FakeClient(client_id, transport, **self.client_options)
        self.clients.append(client)
        return client

    @property
    def client(self) -> FakeClient:
        return self.clients[-1]


@pytest.fixture
def make_factory():
    return FakeClientFactory


@pytest.fixture
def sink():
    """Structured logger used as the invocation log sink."""
    return create_logger("test", level=logging.DEBUG)


def log_entries(caplog) -> List[Dict[str, Any]]:
    """Parse the JSON entries written by StructuredLogger."""
    entries = []
    for record in caplog.records:
        if record.name.startswith("buildcast_mqtt."):
            entries.append(json.loads(record.getMessage()))
    return entries


def events(caplog) -> List[str]:
    return [entry['event'] for entry in log_entries(caplog)]
