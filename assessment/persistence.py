"""
Client key-value storage.

The New-User State Machine only needs get/set/remove on string values,
single-key atomic. Two implementations:

- InMemoryKeyValueStore: dict-backed, for tests and throwaway sessions
- JsonFileKeyValueStore: one JSON object on disk, rewritten on every
  mutation (the browser localStorage analogue)
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = "outputs/client_storage.json"


class KeyValueStore(Protocol):
    """Persistent key-value store contract (string values only)."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


def _check_value(key: str, value: str) -> None:
    if not isinstance(value, str):
        raise TypeError(
            f"Store values must be strings, got {type(value).__name__} for key '{key}'"
        )


class InMemoryKeyValueStore:
    """Dict-backed store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        _check_value(key, value)
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return sorted(self._data)


class JsonFileKeyValueStore:
    """
    File-backed store.

    Layout:
        outputs/client_storage.json
            {
              "new_user_flag_42": "false",
              ...
            }

    Design:
    - Whole store loaded once on init
    - Every set/remove rewrites the file
    - Removing a missing key does not touch the file
    """

    def __init__(self, path: str = DEFAULT_STORE_PATH):
        """
        Initialize file store.

        Args:
            path: JSON file holding the store (created on first write)

        Raises:
            ValueError: If the file exists but does not hold a JSON object
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._data: Dict[str, str] = self._load()
        logger.info(f"JsonFileKeyValueStore initialized: {self.path} ({len(self._data)} keys)")

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(
                f"Store file {self.path} must hold a JSON object, got {type(data).__name__}"
            )
        return data

    def _flush(self) -> None:
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(self._data, f, indent=2, ensure_ascii=False)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        _check_value(key, value)
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._flush()
