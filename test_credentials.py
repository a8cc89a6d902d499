"""
Tests for credential stores.

Usage:
    pytest test_credentials.py
"""

import pytest
import yaml

from buildcast_mqtt import Credentials, InMemoryCredentialStore, YamlCredentialStore


def _write(path, data):
    with open(path, "w") as f:
        yaml.dump(data, f)


def test_in_memory_store():
    store = InMemoryCredentialStore({'a': Credentials('user', 'pw')})
    assert store.lookup('a') == Credentials('user', 'pw')
    assert store.lookup('b') is None

    store.revoke('a')
    assert store.lookup('a') is None


def test_yaml_store_lookup(tmp_path):
    path = tmp_path / "credentials.yaml"
    _write(path, {'credentials': {'mqtt-ci': {'username': 'ci', 'password': 's3cret'}}})

    store = YamlCredentialStore(path)
    assert store.lookup('mqtt-ci') == Credentials('ci', 's3cret')
    assert store.lookup('other') is None


def test_yaml_store_rereads_file(tmp_path):
    """Rotated secrets are picked up without rebuilding the store."""
    path = tmp_path / "credentials.yaml"
    _write(path, {'credentials': {'mqtt-ci': {'username': 'ci', 'password': 'old'}}})
    store = YamlCredentialStore(path)
    assert store.lookup('mqtt-ci').password == 'old'

    _write(path, {'credentials': {'mqtt-ci': {'username': 'ci', 'password': 'new'}}})
    assert store.lookup('mqtt-ci').password == 'new'

    _write(path, {'credentials': {}})
    assert store.lookup('mqtt-ci') is None


def test_yaml_store_top_level_mapping_and_missing_password(tmp_path):
    path = tmp_path / "credentials.yaml"
    _write(path, {'mqtt-ci': {'username': 'ci'}, 'broken': {'password': 'x'}})

    store = YamlCredentialStore(path)
    assert store.lookup('mqtt-ci') == Credentials('ci', '')
    assert store.lookup('broken') is None


def test_yaml_store_missing_file(tmp_path):
    assert YamlCredentialStore(tmp_path / "nope.yaml").lookup('mqtt-ci') is None


def test_yaml_store_invalid_yaml(tmp_path):
    path = tmp_path / "credentials.yaml"
    path.write_text("credentials: {unclosed")
    with pytest.raises(ValueError):
        YamlCredentialStore(path).lookup('mqtt-ci')
