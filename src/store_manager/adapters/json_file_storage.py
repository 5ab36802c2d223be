"""JSON file-backed local storage."""

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path

from store_manager.services.storage import LocalStorage

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


@dataclass
class JsonFileStorage(LocalStorage):
    """Stores each key as a JSON file in a directory on the till."""

    directory: Path

    @classmethod
    def create(cls, directory: str) -> "JsonFileStorage":
        """Create a storage rooted at a directory, creating it if needed."""
        path = Path(directory)
        path.mkdir(parents=True, exist_ok=True)
        return cls(directory=path)

    def get(self, key: str) -> object | None:
        """Return the decoded value for a key, if present."""
        try:
            text = self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return json.loads(text)

    def set(self, key: str, value: object) -> None:
        """Write a value atomically so readers never see a partial file."""
        path = self._path(key)
        temp_path = path.with_name(f"{path.name}.tmp")
        temp_path.write_text(json.dumps(value), encoding="utf-8")
        os.replace(temp_path, path)

    def delete(self, key: str) -> None:
        """Remove the file for a key."""
        self._path(key).unlink(missing_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"
