"""
Credential Lookup
=================

Bounded Context: Broker Authentication

Credentials are resolved by id each time a notification connects, so a
rotated or revoked secret takes effect on the next build. Nothing here caches
across lookups.

Implementations:
    InMemoryCredentialStore: Mapping-backed store for embedding callers
    YamlCredentialStore: Reads a YAML file on every lookup

Example YAML:
    credentials:
      mqtt-ci:
        username: "ci"
        password: "s3cret"
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol

import yaml


@dataclass(frozen=True)
class Credentials:
    """Username/password pair; the password never appears in repr()."""
    username: str
    password: str = field(repr=False)


class CredentialLookup(Protocol):
    """Resolves a credentials id to a username/password pair."""

    def lookup(self, credentials_id: str) -> Optional[Credentials]:
        """Return the credentials for ``credentials_id``, or None if unknown."""
        ...


class InMemoryCredentialStore:
    """
    Credential store backed by a mapping of id -> Credentials.

    Example:
        >>> store = InMemoryCredentialStore({'mqtt-ci': Credentials('ci', 'pw')})
        >>> store.lookup('mqtt-ci').username
        'ci'
    """

    def __init__(self, credentials: Optional[Mapping[str, Credentials]] = None):
        self._credentials: Dict[str, Credentials] = dict(credentials or {})

    def add(self, credentials_id: str, credentials: Credentials) -> None:
        self._credentials[credentials_id] = credentials

    def revoke(self, credentials_id: str) -> None:
        self._credentials.pop(credentials_id, None)

    def lookup(self, credentials_id: str) -> Optional[Credentials]:
        return self._credentials.get(credentials_id)


class YamlCredentialStore:
    """
    Credential store reading a YAML file on every lookup.

    A missing file or an id without a username resolves to None.

    Raises:
        ValueError: From lookup(), if the file is not valid YAML
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def lookup(self, credentials_id: str) -> Optional[Credentials]:
        if not self.path.exists():
            return None

        try:
            with open(self.path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {self.path}: {e}")

        entries = data.get("credentials", data) if isinstance(data, dict) else {}
        entry = entries.get(credentials_id) if isinstance(entries, dict) else None
        if not isinstance(entry, dict) or not entry.get("username"):
            return None

        return Credentials(
            username=str(entry["username"]),
            password=str(entry.get("password") or ""),
        )
