"""
Tests for NotificationConfig validation and loading.

Usage:
    pytest test_config.py
"""

import pytest
import yaml

from buildcast_mqtt import (
    DEFAULT_MESSAGE,
    DEFAULT_TOPIC,
    ConfigurationError,
    NotificationConfig,
    Qos,
)


def test_defaults_for_empty_templates():
    config = NotificationConfig(broker="localhost", qos=Qos.AT_MOST_ONCE)
    assert config.effective_topic == DEFAULT_TOPIC == "jenkins/$PROJECT_URL"
    assert config.effective_message == DEFAULT_MESSAGE == "$BUILD_RESULT"

    custom = NotificationConfig(broker="localhost", qos=1, topic="ci/x", message="m")
    assert custom.effective_topic == "ci/x"
    assert custom.effective_message == "m"


@pytest.mark.parametrize("qos", [-1, 3, 7, True])
def test_out_of_range_qos_is_configuration_error(qos):
    with pytest.raises(ConfigurationError):
        NotificationConfig(broker="localhost", qos=qos)


@pytest.mark.parametrize("broker", ["", "   "])
def test_empty_broker_is_configuration_error(broker):
    with pytest.raises(ConfigurationError):
        NotificationConfig(broker=broker, qos=0)


@pytest.mark.parametrize("port", [0, 65536, -5])
def test_invalid_port(port):
    with pytest.raises(ConfigurationError):
        NotificationConfig(broker="localhost", qos=0, port=port)


def test_configuration_error_is_value_error():
    assert issubclass(ConfigurationError, ValueError)


@pytest.mark.parametrize("value,expected", [
    (0, Qos.AT_MOST_ONCE),
    ("1", Qos.AT_LEAST_ONCE),
    (" 2 ", Qos.EXACTLY_ONCE),
    ("at_least_once", Qos.AT_LEAST_ONCE),
    (Qos.EXACTLY_ONCE, Qos.EXACTLY_ONCE),
])
def test_qos_parse(value, expected):
    assert Qos.parse(value) is expected


@pytest.mark.parametrize("value", ["3", "high", None, 1.5])
def test_qos_parse_rejects(value):
    with pytest.raises(ConfigurationError):
        Qos.parse(value)


def test_qos_choices_in_order():
    assert Qos.choices() == [
        ("AT_MOST_ONCE", 0),
        ("AT_LEAST_ONCE", 1),
        ("EXACTLY_ONCE", 2),
    ]


@pytest.mark.parametrize("broker,port,expected", [
    ("localhost", None, ("localhost", 1883, "tcp", False)),
    ("localhost", 1884, ("localhost", 1884, "tcp", False)),
    ("tcp://mqtt.example.org:1999", None, ("mqtt.example.org", 1999, "tcp", False)),
    ("tcp://mqtt.example.org", None, ("mqtt.example.org", 1883, "tcp", False)),
    ("ssl://mqtt.example.org", None, ("mqtt.example.org", 8883, "tcp", True)),
    ("mqtts://mqtt.example.org:9000", None, ("mqtt.example.org", 9000, "tcp", True)),
    ("ws://mqtt.example.org:9001", None, ("mqtt.example.org", 9001, "websockets", False)),
    ("wss://mqtt.example.org", None, ("mqtt.example.org", 443, "websockets", True)),
    ("tcp://mqtt.example.org:1999", 2000, ("mqtt.example.org", 2000, "tcp", False)),
    ("broker.test:1883", None, ("broker.test", 1883, "tcp", False)),
    ("broker.test:1999", None, ("broker.test", 1999, "tcp", False)),
    ("broker.test:1999", 2000, ("broker.test", 2000, "tcp", False)),
    ("::1", None, ("::1", 1883, "tcp", False)),
])
def test_broker_address(broker, port, expected):
    address = NotificationConfig(broker=broker, qos=0, port=port).broker_address()
    assert (address.host, address.port, address.transport, address.tls) == expected


@pytest.mark.parametrize("broker", [
    "http://example.org", "tcp://", "tcp://host:notaport",
    "broker.test:", ":1883", "broker.test:mqtt", "broker.test:70000",
])
def test_bad_broker_url(broker):
    with pytest.raises(ConfigurationError):
        NotificationConfig(broker=broker, qos=0)


def test_from_dict_nested_and_aliases():
    config = NotificationConfig.from_dict({
        'notification': {
            'broker_url': 'tcp://broker:1883',
            'qos': '2',
            'retain_message': True,
            'credentials_id': 'mqtt-ci',
            'topic': '',
        }
    })
    assert config.broker == 'tcp://broker:1883'
    assert config.qos is Qos.EXACTLY_ONCE
    assert config.retain is True
    assert config.credentials_id == 'mqtt-ci'
    assert config.has_credentials
    assert config.effective_topic == DEFAULT_TOPIC


def test_from_dict_requires_broker_and_qos():
    with pytest.raises(ConfigurationError, match="broker"):
        NotificationConfig.from_dict({'qos': 0})
    with pytest.raises(ConfigurationError, match="qos"):
        NotificationConfig.from_dict({'broker': 'localhost'})


def test_from_dict_empty_credentials_id_is_anonymous():
    config = NotificationConfig.from_dict({'broker': 'localhost', 'qos': 0, 'credentials_id': ''})
    assert config.credentials_id is None
    assert not config.has_credentials


def test_from_dict_numeric_text_settings_become_strings():
    """YAML loads `credentials_id: 1234` as an int."""
    config = NotificationConfig.from_dict({
        'broker': 'localhost', 'qos': 1,
        'credentials_id': 1234, 'topic': 42, 'message': 7, 'client_id': 99,
    })
    assert config.credentials_id == '1234'
    assert config.has_credentials
    assert config.topic == '42'
    assert config.message == '7'
    assert config.client_id == '99'


@pytest.mark.parametrize("field,value", [
    ("credentials_id", 1234),
    ("topic", ["ci"]),
    ("message", None),
    ("broker", 42),
    ("client_id", 1),
    ("retain", "false"),
])
def test_wrong_types_are_configuration_errors(field, value):
    kwargs = {'broker': 'localhost', 'qos': 0, field: value}
    with pytest.raises(ConfigurationError, match=field):
        NotificationConfig(**kwargs)


@pytest.mark.parametrize("value,expected", [
    (True, True),
    (False, False),
    ("false", False),
    ("False", False),
    ("no", False),
    ("0", False),
    (0, False),
    ("true", True),
    ("YES", True),
    (1, True),
])
def test_from_dict_retain_parsed_strictly(value, expected):
    config = NotificationConfig.from_dict({'broker': 'localhost', 'qos': 0, 'retain': value})
    assert config.retain is expected


@pytest.mark.parametrize("value", ["maybe", 2, 1.5, [], "on second thought"])
def test_from_dict_rejects_non_boolean_retain(value):
    with pytest.raises(ConfigurationError, match="retain"):
        NotificationConfig.from_dict({'broker': 'localhost', 'qos': 0, 'retain': value})


def test_from_yaml(tmp_path):
    path = tmp_path / "notifier.yaml"
    with open(path, "w") as f:
        yaml.dump({'notification': {'broker': 'localhost', 'qos': 1, 'retain': True}}, f)

    config = NotificationConfig.from_yaml(path)
    assert config.qos == 1
    assert config.retain


def test_from_yaml_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        NotificationConfig.from_yaml(tmp_path / "missing.yaml")


def test_from_yaml_invalid(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("notification: [unclosed")
    with pytest.raises(ConfigurationError):
        NotificationConfig.from_yaml(path)
