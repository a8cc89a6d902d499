"""
Configuration schema for build notifications.

This module defines the notification configuration: broker address, topic and
message templates, delivery guarantee, retain flag and the credentials
reference. The record is validated once when it is built and then reused for
every build.
"""

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlsplit

import yaml

from .errors import ConfigurationError

DEFAULT_TOPIC = "jenkins/$PROJECT_URL"
DEFAULT_MESSAGE = "$BUILD_RESULT"
DEFAULT_CLIENT_ID = "buildcast_notifier"

# scheme -> (transport, tls, default port)
BROKER_SCHEMES = {
    "tcp": ("tcp", False, 1883),
    "mqtt": ("tcp", False, 1883),
    "ssl": ("tcp", True, 8883),
    "tls": ("tcp", True, 8883),
    "mqtts": ("tcp", True, 8883),
    "ws": ("websockets", False, 80),
    "wss": ("websockets", True, 443),
}

_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0"}


def parse_bool(value: Any, name: str) -> bool:
    """
    Parse a boolean setting strictly.

    Accepts a bool, 0/1, or one of true/false, yes/no, on/off (any case).

    Raises:
        ConfigurationError: For any other value
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    raise ConfigurationError(f"{name} must be true or false, got {value!r}")


def _optional_str(value: Any) -> Optional[str]:
    # YAML turns bare numbers into ints; ids and templates are text
    if value is None:
        return None
    return str(value)


class Qos(IntEnum):
    """MQTT delivery guarantee."""
    AT_MOST_ONCE = 0
    AT_LEAST_ONCE = 1
    EXACTLY_ONCE = 2

    @classmethod
    def parse(cls, value: Union[int, str, 'Qos']) -> 'Qos':
        """
        Parse a QoS level from an int, a numeric string or a member name.

        Raises:
            ConfigurationError: If the value is not 0, 1 or 2
        """
        if isinstance(value, bool):
            raise ConfigurationError(f"MQTT QoS must be 0, 1, or 2, got {value!r}")
        if isinstance(value, str):
            text = value.strip()
            if text.upper() in cls.__members__:
                return cls[text.upper()]
            try:
                value = int(text)
            except ValueError:
                raise ConfigurationError(
                    f"MQTT QoS must be 0, 1, or 2, got {value!r}"
                )
        try:
            return cls(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"MQTT QoS must be 0, 1, or 2, got {value!r}")

    @classmethod
    def choices(cls) -> List[Tuple[str, int]]:
        """(name, value) pairs in delivery-guarantee order."""
        return [(qos.name, qos.value) for qos in cls]


@dataclass(frozen=True)
class BrokerAddress:
    """Where and how to connect."""

    host: str
    port: int
    transport: str = "tcp"
    tls: bool = False

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class NotificationConfig:
    """
    MQTT build notification configuration.

    Immutable after construction (frozen dataclass). Empty topic or message
    templates fall back to DEFAULT_TOPIC / DEFAULT_MESSAGE.

    Example YAML:
        notification:
          broker: "tcp://mqtt.example.org:1883"
          topic: "ci/$PROJECT_URL"
          message: "$BUILD_RESULT #$BUILD_NUMBER"
          qos: 1
          retain: true
          credentials_id: "mqtt-ci"
    """

    broker: str
    qos: Qos
    port: Optional[int] = None
    topic: str = ""
    message: str = ""
    retain: bool = False
    credentials_id: Optional[str] = None
    client_id: str = DEFAULT_CLIENT_ID
    keepalive: int = 60
    connect_timeout: float = 10.0
    publish_timeout: float = 10.0

    def __post_init__(self):
        """Validate notification configuration."""
        for name in ("broker", "topic", "message", "client_id"):
            if not isinstance(getattr(self, name), str):
                raise ConfigurationError(
                    f"{name} must be a string, got {type(getattr(self, name)).__name__}"
                )
        if self.credentials_id is not None and not isinstance(self.credentials_id, str):
            raise ConfigurationError(
                f"credentials_id must be a string, got {type(self.credentials_id).__name__}"
            )
        if not isinstance(self.retain, bool):
            raise ConfigurationError(f"retain must be a bool, got {self.retain!r}")

        if not self.broker.strip():
            raise ConfigurationError("broker cannot be empty")

        if isinstance(self.qos, bool) or self.qos not in {0, 1, 2}:
            raise ConfigurationError(
                f"MQTT QoS must be 0, 1, or 2, got {self.qos!r}"
            )

        if self.port is not None and not 1 <= self.port <= 65535:
            raise ConfigurationError(
                f"MQTT port must be in [1, 65535], got {self.port}"
            )

        if not self.client_id:
            raise ConfigurationError("client_id cannot be empty")

        if self.keepalive <= 0:
            raise ConfigurationError(
                f"keepalive must be positive, got {self.keepalive}"
            )

        for name in ("connect_timeout", "publish_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(
                    f"{name} must be positive, got {getattr(self, name)}"
                )

        # Parses the URL form and rejects unknown schemes
        self.broker_address()

    @property
    def effective_topic(self) -> str:
        return self.topic or DEFAULT_TOPIC

    @property
    def effective_message(self) -> str:
        return self.message or DEFAULT_MESSAGE

    @property
    def qos_level(self) -> Qos:
        return Qos(self.qos)

    @property
    def has_credentials(self) -> bool:
        return bool(self.credentials_id and self.credentials_id.strip())

    def broker_address(self) -> BrokerAddress:
        """
        Resolve the broker setting into host, port and transport.

        Accepts a bare host name, ``host:port``, or a URL such as
        ``tcp://host:1883``, ``ssl://host`` or ``ws://host:9001``. An explicit
        ``port`` setting wins over the port in the broker value.

        Raises:
            ConfigurationError: If the URL is malformed or its scheme unknown
        """
        broker = self.broker.strip()

        if "://" not in broker:
            # A bare IPv6 address has several colons and carries no port
            if broker.count(":") != 1:
                return BrokerAddress(host=broker, port=self.port or 1883)
            host, _, port_text = broker.partition(":")
            if not host or not port_text.isdigit() or not 1 <= int(port_text) <= 65535:
                raise ConfigurationError(
                    f"Broker must be host or host:port, got {broker!r}"
                )
            return BrokerAddress(host=host, port=self.port or int(port_text))

        parts = urlsplit(broker)
        scheme = parts.scheme.lower()
        if scheme not in BROKER_SCHEMES:
            raise ConfigurationError(
                f"Unsupported broker scheme: {parts.scheme!r}. "
                f"Must be one of {sorted(BROKER_SCHEMES)}"
            )
        if not parts.hostname:
            raise ConfigurationError(f"Broker URL has no host: {broker!r}")

        try:
            url_port = parts.port
        except ValueError as e:
            raise ConfigurationError(f"Invalid broker URL {broker!r}: {e}")

        transport, tls, default_port = BROKER_SCHEMES[scheme]
        return BrokerAddress(
            host=parts.hostname,
            port=self.port or url_port or default_port,
            transport=transport,
            tls=tls,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotificationConfig":
        """
        Build configuration from a plain dict.

        Settings may be nested under a ``notification`` key. ``broker_url``
        is accepted as an alias of ``broker``.

        Raises:
            ConfigurationError: If required settings are missing or invalid
        """
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )
        data = data.get("notification", data)
        if not isinstance(data, dict):
            raise ConfigurationError("'notification' must be a mapping")

        broker = data.get("broker", data.get("broker_url"))
        if broker is None:
            raise ConfigurationError("Missing required setting: broker")
        if "qos" not in data:
            raise ConfigurationError("Missing required setting: qos")

        port = data.get("port")
        try:
            port = int(port) if port is not None else None
            keepalive = int(data.get("keepalive", 60))
            connect_timeout = float(data.get("connect_timeout", 10.0))
            publish_timeout = float(data.get("publish_timeout", 10.0))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}")

        return cls(
            broker=str(broker),
            qos=Qos.parse(data["qos"]),
            port=port,
            topic=_optional_str(data.get("topic")) or "",
            message=_optional_str(data.get("message")) or "",
            retain=parse_bool(
                data.get("retain", data.get("retain_message", False)), "retain"
            ),
            credentials_id=_optional_str(data.get("credentials_id")) or None,
            client_id=_optional_str(data.get("client_id")) or DEFAULT_CLIENT_ID,
            keepalive=keepalive,
            connect_timeout=connect_timeout,
            publish_timeout=publish_timeout,
        )

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "NotificationConfig":
        """
        Load configuration from YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigurationError: If the YAML or its settings are invalid
        """
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {yaml_path}: {e}")

        return cls.from_dict(data or {})
