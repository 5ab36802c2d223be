"""Local key-value storage abstractions."""

import json
from dataclasses import dataclass
from typing import Protocol


class LocalStorage(Protocol):
    """Synchronous storage for JSON-serializable blobs."""

    def get(self, key: str) -> object | None:
        """Return the stored value, or None when the key is absent."""

    def set(self, key: str, value: object) -> None:
        """Store a JSON-serializable value under a key."""

    def delete(self, key: str) -> None:
        """Remove a key if present."""


@dataclass
class InMemoryStorage(LocalStorage):
    """In-memory storage that keeps values as serialized JSON."""

    _entries: dict[str, str]

    def __init__(self) -> None:
        self._entries = {}

    def get(self, key: str) -> object | None:
        """Return a copy of the stored value."""
        raw = self._entries.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: object) -> None:
        """Serialize and store a value."""
        self._entries[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        """Remove a stored value."""
        self._entries.pop(key, None)
