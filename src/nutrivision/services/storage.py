"""Key-value storage abstractions."""

from dataclasses import dataclass
from typing import Protocol


class KeyValueStore(Protocol):
    """Storage interface for string values addressed by key."""

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store used for development and tests."""

    _values: dict[str, str]

    def __init__(self) -> None:
        self._values = {}

    def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        """Store a value under a key."""
        self._values[key] = value

    def keys(self) -> list[str]:
        """Return all stored keys."""
        return list(self._values)
