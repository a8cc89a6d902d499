"""
Base MQTT Publisher
==================

Bounded Context: MQTT Infrastructure

This module provides the abstract base class for one-shot MQTT publishers.

Design:
- One client per publisher instance, never shared between invocations
- Credentials resolved at connect time, never cached
- Scoped connection: session() always disconnects once the loop started
- Errors raised as NotifierError subclasses; callers decide how to report

Architecture:
    BasePublisher (abstract)
        ↓
    BuildResultPublisher (concrete)

Responsibilities:
- MQTT connection lifecycle (connect, publish, disconnect)
- Credential resolution and anonymous fallback
- Pipeline stage tracking
- NOT responsible for: Message formatting (delegated to subclasses)
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, Tuple

import paho.mqtt.client as mqtt

from ..config import NotificationConfig
from ..credentials import CredentialLookup, Credentials
from ..errors import BrokerConnectionError, PublishError
from ..logging import StructuredLogger, LogEvent
from ..schemas import PipelineStage

ClientFactory = Callable[[str, str], Any]


def create_client(client_id: str, transport: str = "tcp") -> mqtt.Client:
    """Create a paho MQTT 3.1.1 client using the version 2 callback API."""
    return mqtt.Client(
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        client_id=client_id,
        protocol=mqtt.MQTTv311,
        transport=transport,
    )


class BasePublisher(ABC):
    """
    Abstract base class for one-shot MQTT publishers.

    Each instance owns one client for one connect/publish/disconnect
    sequence. Subclasses must implement format_message().

    Attributes:
        config: Notification configuration
        logger: Log sink for this invocation
        address: Resolved broker address
        stage: Current pipeline stage
        failed_stage: Stage that raised, if any

    Thread Safety:
        Not shared across threads; paho's network loop only runs between
        connect() and disconnect().
    """

    def __init__(
        self,
        config: NotificationConfig,
        logger: StructuredLogger,
        credential_lookup: Optional[CredentialLookup] = None,
        client_factory: Optional[ClientFactory] = None
    ):
        """
        Initialize MQTT publisher.

        Args:
            config: Validated notification configuration
            logger: Structured logger for this invocation
            credential_lookup: Resolves config.credentials_id (optional)
            client_factory: Builds the MQTT client from (client_id, transport);
                defaults to create_client
        """
        self.config = config
        self.logger = logger
        self.credential_lookup = credential_lookup
        self.address = config.broker_address()
        self._client_factory = client_factory or create_client

        self.client: Any = None
        self.stage = PipelineStage.IDLE
        self.failed_stage: Optional[PipelineStage] = None

        # Connection state
        self._connack = threading.Event()
        self._connected = threading.Event()
        self._refusal: Optional[str] = None
        self._loop_started = False

    def _on_connect(
        self,
        client: Any,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any = None
    ) -> None:
        """
        Callback when the broker answers CONNECT.

        Args:
            client: MQTT client instance
            userdata: User data (unused)
            flags: Connect flags
            reason_code: CONNACK reason (0 = accepted)
            properties: MQTT v5 properties (unused)
        """
        if reason_code == 0:
            self._connected.set()
        else:
            self._refusal = str(reason_code)
        self._connack.set()

    def _on_disconnect(
        self,
        client: Any,
        userdata: Any,
        disconnect_flags: Any,
        reason_code: Any,
        properties: Any = None
    ) -> None:
        """Callback when disconnected from broker."""
        self._connected.clear()

    def resolve_credentials(self) -> Optional[Credentials]:
        """
        Look up the configured credentials.

        Returns None when no credentials id is configured, or when the lookup
        misses; in that case the connection proceeds anonymously.
        """
        if not self.config.has_credentials:
            return None

        credentials_id = self.config.credentials_id.strip()
        credentials = None
        if self.credential_lookup is not None:
            credentials = self.credential_lookup.lookup(credentials_id)

        if credentials is None:
            self.logger.warning(
                event=LogEvent.CREDENTIALS_NOT_FOUND,
                message="No credentials found; connecting anonymously",
                metadata={'credentials_id': credentials_id}
            )
        else:
            self.logger.info(
                event=LogEvent.CREDENTIALS_RESOLVED,
                message="Resolved broker credentials",
                metadata={
                    'credentials_id': credentials_id,
                    'username': credentials.username
                }
            )
        return credentials

    def connect(self) -> None:
        """
        Connect to the MQTT broker and wait for its CONNACK.

        Raises:
            BrokerConnectionError: If the broker is unreachable, refuses the
                connection or does not answer within config.connect_timeout
        """
        self.stage = PipelineStage.CONNECTING
        credentials = self.resolve_credentials()

        self.client = self._client_factory(
            self.config.client_id, self.address.transport
        )
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

        if self.address.tls:
            self.client.tls_set()
        if credentials is not None:
            self.client.username_pw_set(credentials.username, credentials.password)

        try:
            self.client.connect(
                self.address.host,
                self.address.port,
                keepalive=self.config.keepalive
            )
        except (OSError, ValueError) as e:
            raise BrokerConnectionError(
                f"Unable to connect to MQTT broker at {self.address}: {e}"
            ) from e

        self.client.loop_start()
        self._loop_started = True

        if credentials is not None:
            self.stage = PipelineStage.AUTHENTICATING

        timeout = self.config.connect_timeout
        if not self._connack.wait(timeout=timeout):
            raise BrokerConnectionError(
                f"Connection timeout after {timeout}s ({self.address})"
            )
        if not self._connected.is_set():
            raise BrokerConnectionError(
                f"Broker {self.address} refused connection: {self._refusal}"
            )

        self.logger.info(
            event=LogEvent.MQTT_CONNECTED,
            message="Connected to MQTT broker",
            metadata={
                'broker': str(self.address),
                'client_id': self.config.client_id,
                'authenticated': credentials is not None
            }
        )

    def disconnect(self) -> None:
        """
        Disconnect from MQTT broker.

        No-op unless connect() started the network loop. Errors are logged,
        never raised.
        """
        if not self._loop_started:
            return

        self.stage = PipelineStage.DISCONNECTING
        try:
            try:
                self.client.disconnect()
            finally:
                self.client.loop_stop()
            self.logger.info(
                event=LogEvent.MQTT_DISCONNECTED,
                message="Disconnected from broker",
                metadata={'broker': str(self.address)}
            )
        except Exception as e:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message="Error during disconnect",
                exc_info=e,
                metadata={'broker': str(self.address)}
            )
        finally:
            self._loop_started = False
            self._connected.clear()

    @contextmanager
    def session(self) -> Iterator[Any]:
        """
        Hold a broker connection for the duration of a with-block.

        The connection is released on every exit path, including a failure
        inside connect() after the network loop started. The stage that
        raised is kept in failed_stage.
        """
        try:
            self.connect()
            yield self.client
        except Exception:
            self.failed_stage = self.stage
            raise
        finally:
            self.disconnect()

    def is_connected(self) -> bool:
        """Check if currently connected to broker."""
        return self._connected.is_set()

    @abstractmethod
    def format_message(self, *args, **kwargs) -> Tuple[str, bytes]:
        """
        Build the (topic, payload) pair to publish.

        Subclasses must implement this to provide message-specific formatting.
        """
        raise NotImplementedError("Subclasses must implement format_message()")

    def publish(self, topic: str, payload: bytes) -> None:
        """
        Publish one message and wait until the client reports it sent.

        Uses config.qos and config.retain. For QoS 1 and 2 "sent" means the
        broker acknowledged it.

        Raises:
            PublishError: If not connected, the publish is rejected, or it
                does not complete within config.publish_timeout
        """
        self.stage = PipelineStage.PUBLISHING
        if not self._connected.is_set():
            raise PublishError("Cannot publish: not connected to broker")

        qos = int(self.config.qos)
        info = self.client.publish(
            topic,
            payload=payload,
            qos=qos,
            retain=self.config.retain
        )
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            self.logger.warning(
                event=LogEvent.MQTT_PUBLISH_FAILED,
                message="Publish rejected by client",
                metadata={'topic': topic, 'qos': qos, 'rc': info.rc}
            )
            raise PublishError(
                f"Publish failed (rc={info.rc}): {mqtt.error_string(info.rc)}"
            )

        timeout = self.config.publish_timeout
        info.wait_for_publish(timeout=timeout)
        if not info.is_published():
            self.logger.warning(
                event=LogEvent.MQTT_PUBLISH_FAILED,
                message="Publish not acknowledged",
                metadata={'topic': topic, 'qos': qos, 'timeout': timeout}
            )
            raise PublishError(f"Publish not completed within {timeout}s")

        self.logger.info(
            event=LogEvent.MQTT_PUBLISH_SUCCESS,
            message="Published message",
            metadata={
                'topic': topic,
                'qos': qos,
                'retain': self.config.retain,
                'bytes': len(payload)
            }
        )
